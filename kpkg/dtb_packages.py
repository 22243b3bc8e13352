"""
Device tree subpackage tables per architecture family.

Source globs are relative to arch/<dts_arch>/boot/dts in the kernel tree.
Table order is the order of the subpackages in the generated spec file.
"""

from typing import Dict, List, Tuple

from kpkg.config import ArchFamily
from kpkg.models import DtbPackage


ARMV6_PACKAGES: Tuple[DtbPackage, ...] = (
    DtbPackage.of("dtb-bcm2835", "broadcom/bcm2835-*.dts", "Raspberry Pi (BCM2835) based armv6 systems"),
)

ARMV7_PACKAGES: Tuple[DtbPackage, ...] = (
    DtbPackage.of("dtb-am335x", "ti/omap/am335x-*.dts", "AM335x based arm systems"),
    DtbPackage.of("dtb-bcm2836", "broadcom/bcm2836-*.dts", "Raspberry Pi 2 based arm systems"),
    DtbPackage.of("dtb-bcm2837", "broadcom/bcm2837-*.dts", "Raspberry Pi 3 based arm systems"),
    DtbPackage.of("dtb-exynos", "samsung/exynos*.dts", "Samsung Exynos based arm systems"),
    DtbPackage.of("dtb-imx6", "nxp/imx/imx6*.dts", "i.MX6 based arm systems"),
    DtbPackage.of("dtb-meson", "amlogic/meson*.dts", "Amlogic MesonX based arm systems"),
    DtbPackage.of("dtb-rk3xxx", "rockchip/rk3*.dts", "Rockchip RK3xxx based arm systems"),
    DtbPackage.of("dtb-socfpga", "intel/socfpga/socfpga_*.dts", "SoCFPGA based arm systems"),
    DtbPackage.of("dtb-sun7i", "allwinner/sun7i-*.dts", "Allwinner A20 based arm systems"),
    DtbPackage.of("dtb-tegra", "nvidia/tegra*.dts", "NVIDIA Tegra based arm systems"),
    DtbPackage.of("dtb-zynq", "xilinx/zynq-*.dts", "Xilinx Zynq based arm systems"),
)

AARCH64_PACKAGES: Tuple[DtbPackage, ...] = (
    DtbPackage.of("dtb-allwinner", "allwinner/*.dts", "Allwinner based arm64 systems"),
    DtbPackage.of("dtb-altera", "altera/*.dts", "Altera based arm64 systems"),
    DtbPackage.of("dtb-amazon", "amazon/*.dts", "Amazon based arm64 systems"),
    DtbPackage.of("dtb-amd", "amd/*.dts", "AMD based arm64 systems"),
    DtbPackage.of("dtb-amlogic", "amlogic/*.dts", "Amlogic based arm64 systems"),
    DtbPackage.of("dtb-apm", "apm/*.dts", "APM based arm64 systems"),
    DtbPackage.of("dtb-arm", "arm/*.dts", "ARM Ltd. based arm64 systems"),
    DtbPackage.of("dtb-broadcom", "broadcom/bcm*.dts", "Broadcom based arm64 systems"),
    DtbPackage.of("dtb-cavium", "cavium/*.dts", "Cavium based arm64 systems"),
    DtbPackage.of("dtb-exynos", "exynos/*.dts", "Samsung Exynos based arm64 systems"),
    DtbPackage.of("dtb-freescale", "freescale/*.dts", "Freescale based arm64 systems"),
    DtbPackage.of("dtb-hisilicon", "hisilicon/*.dts", "HiSilicon based arm64 systems"),
    DtbPackage.of("dtb-marvell", "marvell/*.dts", "Marvell based arm64 systems"),
    DtbPackage.of("dtb-mediatek", "mediatek/*.dts", "MediaTek based arm64 systems"),
    DtbPackage.of("dtb-nvidia", "nvidia/*.dts", "NVIDIA based arm64 systems"),
    DtbPackage.of("dtb-qcom", "qcom/*.dts", "Qualcomm based arm64 systems"),
    DtbPackage.of("dtb-renesas", "renesas/*.dts", "Renesas based arm64 systems"),
    DtbPackage.of("dtb-rockchip", "rockchip/*.dts", "Rockchip based arm64 systems"),
    DtbPackage.of("dtb-xilinx", "xilinx/*.dts", "Xilinx based arm64 systems"),
)

RISCV64_PACKAGES: Tuple[DtbPackage, ...] = (
    DtbPackage.of("dtb-allwinner", "allwinner/*.dts", "Allwinner based riscv64 systems"),
    DtbPackage.of("dtb-microchip", "microchip/*.dts", "Microchip based riscv64 systems"),
    DtbPackage.of("dtb-sifive", "sifive/*.dts", "SiFive based riscv64 systems"),
    DtbPackage.of("dtb-starfive", "starfive/*.dts", "StarFive based riscv64 systems"),
    DtbPackage.of("dtb-thead", "thead/*.dts", "T-HEAD based riscv64 systems"),
)

DTB_PACKAGES: Dict[ArchFamily, Tuple[DtbPackage, ...]] = {
    ArchFamily.ARMV6: ARMV6_PACKAGES,
    ArchFamily.ARMV7: ARMV7_PACKAGES,
    ArchFamily.AARCH64: AARCH64_PACKAGES,
    ArchFamily.RISCV64: RISCV64_PACKAGES,
}

# Subpackages that replaced an older package name
LEGACY_PROVIDES: Dict[Tuple[ArchFamily, str], List[str]] = {
    (ArchFamily.AARCH64, "dtb-apm"): ["dtb-xgene"],
    (ArchFamily.AARCH64, "dtb-cavium"): ["dtb-thunderx"],
    (ArchFamily.AARCH64, "dtb-xilinx"): ["dtb-zynqmp"],
    (ArchFamily.ARMV7, "dtb-imx6"): ["dtb-imx6q", "dtb-imx6dl"],
}


def get_packages(family: ArchFamily) -> Tuple[DtbPackage, ...]:
    """Get the subpackage table for an architecture family."""
    return DTB_PACKAGES[ArchFamily(family)]
