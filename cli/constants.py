# Upstream naming for the LAME tarballs hosted on SourceForge.
LIBRARY_ID = "lame"
DOWNLOAD_BASE_URL = "https://downloads.sourceforge.net/project/lame/lame"

# Name of the static library that `make install` places in <prefix>/lib.
LINK_LIBRARY_NAME = "mp3lame"

# Subdirectories of the work root (OUT_DIR).
LOCAL_BUILD_DIRNAME = "local_build"
PREFIX_DIRNAME = "lame-install"

# Passed to ./configure ahead of --prefix.
CONFIGURE_FLAGS = ("--enable-nasm", "--enable-static", "--with-pic")

# Environment variables read once at startup; see build_env.py.
ENV_VERSION_MAJOR = "CARGO_PKG_VERSION_MAJOR"
ENV_VERSION_MINOR = "CARGO_PKG_VERSION_MINOR"
ENV_OUT_DIR = "OUT_DIR"
ENV_TARGET_OS = "CARGO_CFG_TARGET_OS"
ENV_BASE_URL = "LAME_DOWNLOAD_BASE_URL"
ENV_SHOW_CMDS = "LAME_SHOW_CMDS"
