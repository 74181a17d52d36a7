"""Static vendor-code and third-party device-type tables."""

from __future__ import annotations

from types import MappingProxyType

MICROSOFT_VENDOR_CODE = 0x0006
APPLE_VENDOR_CODE = 0x004C

# Bluetooth SIG company identifiers seen alongside INGICS beacons.
KNOWN_VENDORS = MappingProxyType(
    {
        0x0000: "Ericsson Technology Licensing",
        0x0001: "Nokia Mobile Phones",
        0x0002: "Intel Corp.",
        0x0003: "IBM Corp.",
        0x0004: "Toshiba Corp.",
        0x0006: "Microsoft",
        0x0008: "Motorola",
        0x000A: "Qualcomm Technologies International, Ltd. (QTIL)",
        0x000D: "Texas Instruments Inc.",
        0x000F: "Broadcom Corporation",
        0x004C: "Apple, Inc.",
        0x0059: "Nordic Semiconductor ASA",
        0x0075: "Samsung Electronics Co. Ltd.",
        0x0087: "Garmin International, Inc.",
        0x00E0: "Google",
        0x0131: "Cypress Semiconductor",
        0x02E5: "Espressif Incorporated",
        0x0499: "Ruuvi Innovations Ltd.",
        0x082C: "INGICS TECHNOLOGY CO., LTD.",
    }
)

# Device type in the low 6 bits of byte 3 of a Microsoft CDP beacon.
MICROSOFT_DEVICE_TYPES = MappingProxyType(
    {
        1: "Xbox One",
        6: "Apple iPhone",
        7: "Apple iPad",
        8: "Android device",
        9: "Windows 10 Desktop",
        11: "Windows 10 Phone",
        12: "Linux device",
        13: "Windows IoT",
        14: "Surface Hub",
        15: "Windows laptop",
        16: "Windows tablet",
    }
)


def vendor_name(code: int) -> str:
    return KNOWN_VENDORS.get(code, f"0x{code:04X}")
