"""
Device tree (dtb) spec file generation.

Expands the subpackage tables in kpkg.dtb_packages into RPM directives and
substitutes them into a spec template, one spec file per architecture family.
"""

import re
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from kpkg.common import logger
from kpkg.config import ARCH_MAPPINGS, OVERLAY_FAMILIES, ArchFamily
from kpkg.dtb_packages import LEGACY_PROVIDES, get_packages
from kpkg.models import DtbPackage


DEFAULT_TEMPLATE = Path(__file__).parent / "data" / "dtb.spec.in"

PLACEHOLDERS = (
    "@NAME@",
    "@ARCH_FAMILY@",
    "@EXCLUSIVE_ARCH@",
    "@DTS_ARCH@",
    "@ALL_SUPPORTED_DTB@",
    "@SUBPKG_DESC@",
)

# A .dts extension, but not the .dtsi include files
_DTS_EXT = re.compile(r"\.dts(?!\w)")

POST_INSTALL = """\
cd /boot
# If /boot/dtb is a symlink, remove it, so that we can replace it.
[ -d dtb ] && [ -L dtb ] && rm -f dtb
# Unless /boot/dtb exists as real directory, create a symlink.
[ -d dtb ] || ln -sf dtb-%kernelrelease dtb"""


class SpecGenerationError(Exception):
    """Exception raised when a spec file cannot be generated."""
    pass


def dtb_glob(source_glob: str) -> str:
    """Map a .dts source glob to the glob of the compiled .dtb files."""
    return _DTS_EXT.sub(".dtb", source_glob)


def owned_dirs(path: str) -> List[str]:
    """
    Get %dir lines for every parent directory of a path, root to leaf.

    Args:
        path: Path relative to %{dtbdir}, e.g. 'ti/omap/am335x-*.dtb'

    Returns:
        One '%dir %{dtbdir}/<prefix>' line per parent directory
    """
    segments = [s for s in path.split("/") if s and s != "."]
    lines = []
    prefix = ""
    for segment in segments[:-1]:
        prefix = f"{prefix}/{segment}" if prefix else segment
        line = f"%dir %{{dtbdir}}/{prefix}"
        if line not in lines:
            lines.append(line)
    return lines


def legacy_provides(package: DtbPackage, family: ArchFamily) -> List[str]:
    """Get Provides/Obsoletes lines for renamed subpackages."""
    lines = []
    for old_name in LEGACY_PROVIDES.get((ArchFamily(family), package.name), []):
        lines.append(f"Provides: {old_name} = %version-%release")
        lines.append(f"Obsoletes: {old_name} < %version-%release")
    return lines


def subpackage_block(package: DtbPackage, family: ArchFamily) -> str:
    """
    Build the %package, %description, %post and %files sections of one
    dtb subpackage.
    """
    family = ArchFamily(family)
    binary = dtb_glob(package.source_glob)

    lines = [
        f"%package -n {package.name}",
        f"Summary: {package.description}",
        "Group: System/Boot",
        "Provides: multiversion(dtb)",
        "Requires(post): coreutils",
    ]
    lines.extend(legacy_provides(package, family))
    lines.extend([
        "",
        f"%description -n {package.name}",
        f"Device Tree files for {package.description}.",
        "",
        f"%post -n {package.name}",
        POST_INSTALL,
        "",
        f"%files -n {package.name}",
        "%defattr(-,root,root)",
        "%ghost /boot/dtb",
        "%dir %{dtbdir}",
    ])
    lines.extend(owned_dirs(binary))
    lines.append(f"%{{dtbdir}}/{binary}")
    if family in OVERLAY_FAMILIES:
        overlay_dir = binary.rsplit("/", 1)[0] if "/" in binary else ""
        overlays = f"{overlay_dir}/*.dtbo" if overlay_dir else "*.dtbo"
        lines.append(f"%ghost %{{dtbdir}}/{overlays}")
    lines.append("")
    return "\n".join(lines)


def generate(
    family: ArchFamily,
    packages: Optional[Sequence[DtbPackage]] = None,
) -> Dict[str, str]:
    """
    Compute the placeholder values for one architecture family.

    Args:
        family: Architecture family
        packages: Subpackage table (default: the built-in table for family)

    Returns:
        Mapping of placeholder to replacement text
    """
    family = ArchFamily(family)
    mapping = ARCH_MAPPINGS[family]
    if packages is None:
        packages = get_packages(family)

    blocks = []
    sources = []
    for package in packages:
        blocks.append(subpackage_block(package, family))
        sources.append(package.source_glob)

    return {
        "@NAME@": mapping.package_name,
        "@ARCH_FAMILY@": family.value,
        "@EXCLUSIVE_ARCH@": " ".join(mapping.exclusive_arch),
        "@DTS_ARCH@": mapping.dts_arch,
        "@ALL_SUPPORTED_DTB@": " ".join(sources),
        "@SUBPKG_DESC@": "\n".join(blocks).rstrip("\n"),
    }


class SpecTemplate:
    """
    A spec template with @PLACEHOLDER@ tokens.

    The template is read line by line; every placeholder found in a line is
    replaced, any other text is copied unchanged.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def lines(self) -> Iterator[str]:
        """Iterate over template lines, keeping line endings."""
        try:
            with open(self.path) as f:
                yield from f
        except OSError as e:
            raise SpecGenerationError(f"Cannot read template {self.path}: {e}") from e

    @staticmethod
    def substitute(line: str, values: Dict[str, str]) -> str:
        """Replace the placeholders present in a single line."""
        for placeholder, value in values.items():
            if placeholder in line:
                line = line.replace(placeholder, value)
        return line

    def render(self, values: Dict[str, str]) -> Iterator[str]:
        """Yield substituted template lines in template order."""
        for line in self.lines():
            yield self.substitute(line, values)


def write_spec(
    family: ArchFamily,
    template: Path = DEFAULT_TEMPLATE,
    output_dir: Optional[Path] = None,
    packages: Optional[Sequence[DtbPackage]] = None,
) -> Path:
    """
    Generate the dtb spec file for one architecture family.

    Args:
        family: Architecture family
        template: Spec template path
        output_dir: Directory for the spec file (default: current directory)
        packages: Subpackage table override

    Returns:
        Path to the written spec file
    """
    family = ArchFamily(family)
    output_dir = Path(output_dir) if output_dir else Path.cwd()
    spec_path = output_dir / ARCH_MAPPINGS[family].spec_name

    values = generate(family, packages)
    rendered = list(SpecTemplate(template).render(values))

    try:
        with open(spec_path, "w") as f:
            f.writelines(rendered)
    except OSError as e:
        raise SpecGenerationError(f"Cannot write {spec_path}: {e}") from e

    count = len(packages) if packages is not None else len(get_packages(family))
    logger.info(f"Wrote {spec_path} with {count} subpackages")
    return spec_path


def write_specs(
    families: Iterable[ArchFamily],
    template: Path = DEFAULT_TEMPLATE,
    output_dir: Optional[Path] = None,
) -> List[Path]:
    """Generate spec files for several families; the first failure aborts."""
    return [write_spec(family, template, output_dir) for family in families]
