from dataclasses import dataclass
from pathlib import Path

from hermetic import sez
from provisioning_errors import PatchError


@dataclass(frozen=True)
class TextPatch:
    """Replace every occurrence of `old` with `new` in one file of the source tree.

    Replacement repeats until `old` no longer occurs, since a single pass can
    splice a fresh occurrence together (e.g. removing "ab" from "abb").
    Afterwards there is nothing left to replace, so applying the same patch
    again is a no-op.
    """

    relpath: str
    old: str
    new: str = ""
    reason: str = ""

    def __post_init__(self):
        if not self.old:
            raise ValueError(f"Patch for {self.relpath} has nothing to replace")
        if self.old in self.new:
            raise ValueError(f"Patch for {self.relpath} would re-introduce {self.old!r}")

    def target(self, source_dir: Path) -> Path:
        return source_dir.joinpath(*self.relpath.split("/"))

    def rewrite(self, content: str, path: Path) -> str:
        # A shrinking replacement converges within len(content) passes.
        for _ in range(len(content) + 1):
            if self.old not in content:
                return content
            content = content.replace(self.old, self.new)
        raise PatchError(f"Replacing {self.old!r} in {path} does not converge", path)

    def apply(self, source_dir: Path) -> bool:
        """Returns True if the file was rewritten, False if already patched."""
        path = self.target(source_dir)
        try:
            # newline="" keeps CRLF/LF exactly as shipped.
            with open(path, "r", encoding="utf-8", newline="") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise PatchError(f"Unable to read {path}: {e}", path) from e

        if self.old not in content:
            return False

        patched = self.rewrite(content, path)
        try:
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(patched)
        except OSError as e:
            raise PatchError(f"Unable to write {path}: {e}", path) from e
        return True


PLATFORM_PATCHES: dict[str, tuple[TextPatch, ...]] = {
    "macos": (
        # Fix undefined symbol error _lame_init_old
        # https://sourceforge.net/p/lame/mailman/message/36081038/
        TextPatch(
            relpath="include/libmp3lame.sym",
            old="lame_init_old\n",
            reason="drop lame_init_old from the exported symbol list",
        ),
    ),
}


def patches_for(
    platform_id: str, registry: dict[str, tuple[TextPatch, ...]] = PLATFORM_PATCHES
) -> tuple[TextPatch, ...]:
    return registry.get(platform_id, ())


def apply_patches(
    source_dir: Path,
    platform_id: str,
    registry: dict[str, tuple[TextPatch, ...]] = PLATFORM_PATCHES,
) -> list[TextPatch]:
    """Apply the patches registered for `platform_id`, in order.

    Returns the patches which actually changed a file.
    """
    applied = []
    for patch in patches_for(platform_id, registry):
        if patch.apply(source_dir):
            sez(f"Patched {patch.relpath}: {patch.reason or 'ok'}", ctx="(patch) ")
            applied.append(patch)
        else:
            sez(f"{patch.relpath} already patched", ctx="(patch) ")
    return applied
