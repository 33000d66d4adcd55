# tests/test_sources.py
"""
Tests for source accessors and the tool output parsers behind them.
"""

import json

import pytest

from conftest import FakeConnector, capabilities, failed
from hwstats.collectors.sources import SourceContext, get_source
from hwstats.collectors.sources.battery_sources import parse_upower_info
from hwstats.collectors.sources.device_sources import sum_memory_modules
from hwstats.collectors.sources.display_sources import decode_edid, edid_hex, parse_edid_decode, parse_xrandr
from hwstats.collectors.sources.gpu_sources import gpu_descriptions, kernel_driver, vendor_from_description
from hwstats.collectors.sources.storage_sources import LSBLK_ARGS, primary_lsblk_disk
from hwstats.parsers import PatternExtractor

XRANDR_OUTPUT = """Screen 0: minimum 320 x 200, current 3840 x 1200, maximum 16384 x 16384
HDMI-1 disconnected (normal left inverted right x axis y axis)
eDP-1 connected primary 1920x1200+0+0 (normal left inverted right x axis y axis) 344mm x 193mm
   1920x1200     60.00*+  59.88
   1600x1200     59.92
DP-2 connected 1920x1080+1920+0 (normal left inverted right x axis y axis) 527mm x 296mm
   1920x1080     60.00*+
"""

XRANDR_NO_SIZE = """Screen 0: minimum 320 x 200, current 1024 x 768, maximum 8192 x 8192
Virtual-1 connected primary 1024x768+0+0 (normal left inverted right x axis y axis) 0mm x 0mm
   1024x768      60.00*+
"""

EDID_DECODE_OUTPUT = """edid-decode (hex):

Block 0, Base EDID:
  EDID Structure Version & Revision: 1.4
  Vendor & Product Identification:
    Manufacturer: BOE
  Basic Display Parameters & Features:
    Digital display
    Maximum image size: 34 cm x 19 cm
  Detailed Timing Descriptors:
    DTD 1:  1920x1200   60.002 Hz   8:5    74.041 kHz 154.000 MHz (344 mm x 193 mm)
"""

LSPCI_OUTPUT = """00:00.0 Host bridge: Intel Corporation 11th Gen Core Processor Host Bridge/DRAM Registers (rev 01)
00:02.0 VGA compatible controller: Intel Corporation TigerLake-LP GT2 [Iris Xe Graphics] (rev 01)
01:00.0 3D controller: NVIDIA Corporation GA107M [GeForce RTX 3050 Mobile] (rev a1)
"""

LSPCI_K_OUTPUT = """00:00.0 Host bridge: Intel Corporation 11th Gen Core Processor Host Bridge/DRAM Registers (rev 01)
\tSubsystem: Lenovo Device 22d8
\tKernel driver in use: tgl_uncore
00:02.0 VGA compatible controller: Intel Corporation TigerLake-LP GT2 [Iris Xe Graphics] (rev 01)
\tSubsystem: Lenovo Device 22d8
\tKernel driver in use: i915
\tKernel modules: i915
"""

DMIDECODE_MEMORY = """# dmidecode 3.3
Getting SMBIOS data from sysfs.

Handle 0x0040, DMI type 17, 92 bytes
Memory Device
\tTotal Width: 64 bits
\tSize: 8192 MB
\tVolatile Size: 8 GB
\tLocator: DIMM 0

Handle 0x0041, DMI type 17, 92 bytes
Memory Device
\tSize: No Module Installed

Handle 0x0042, DMI type 17, 92 bytes
Memory Device
\tSize: 8 GB
\tLocator: DIMM 1
"""

UPOWER_DEVICES = """/org/freedesktop/UPower/devices/line_power_AC
/org/freedesktop/UPower/devices/battery_BAT0
/org/freedesktop/UPower/devices/DisplayDevice
"""

UPOWER_INFO = """  native-path:          BAT0
  vendor:               SMP
  model:                5B10W13930
  power supply:         yes
  battery
    present:             yes
    state:               discharging
    energy:              49.6 Wh
    energy-full:         57 Wh
    energy-full-design:  57 Wh
    voltage:             15.4 V
    percentage:          87%
    capacity:            100%
"""

UPOWER_KEYS = {
    ('upower', '-e'): UPOWER_DEVICES,
    ('upower', '-i', '/org/freedesktop/UPower/devices/battery_BAT0'): UPOWER_INFO,
}


def make_edid(h_active=1920, v_active=1200, h_mm=344, v_mm=193, h_cm=34, v_cm=19, pixel_clock=15400):
    """Minimal EDID 1.4 base block"""
    data = bytearray(128)
    data[:8] = b'\x00\xff\xff\xff\xff\xff\xff\x00'
    data[21] = h_cm
    data[22] = v_cm
    dtd = bytearray(18)
    dtd[0] = pixel_clock & 0xFF
    dtd[1] = pixel_clock >> 8
    dtd[2] = h_active & 0xFF
    dtd[4] = (h_active >> 8) << 4
    dtd[5] = v_active & 0xFF
    dtd[7] = (v_active >> 8) << 4
    dtd[12] = h_mm & 0xFF
    dtd[13] = v_mm & 0xFF
    dtd[14] = ((h_mm >> 8) << 4) | (v_mm >> 8)
    data[54:72] = dtd
    return bytes(data)


def make_context(connector, *names, blob=None):
    return SourceContext(connector, capabilities(*names, blob=blob), PatternExtractor())


def call(name, context):
    return get_source(name)(context)


class TestSourceContext:
    """Tests for the per-run source context"""

    def test_commands_run_once_per_run(self):
        connector = FakeConnector(commands={('lspci',): LSPCI_OUTPUT})
        context = make_context(connector, 'lspci')

        assert call('lspci_gpu_model', context) == "Intel Corporation TigerLake-LP GT2 [Iris Xe Graphics]"
        assert call('lspci_gpu_vendor', context) == "Intel"
        assert connector.executed == [('lspci',)]

    def test_failed_command_output_is_none(self):
        connector = FakeConnector(commands={('free', '-b'): failed()})
        assert make_context(connector).run_output(['free', '-b']) is None

    def test_read_file_value_with_pattern(self):
        connector = FakeConnector(files={'/proc/meminfo': "MemTotal:       16109000 kB\nMemFree: 1 kB\n"})
        context = make_context(connector)
        assert context.read_file_value('/proc/meminfo', r'^MemTotal:\s*(\d+)') == "16109000"
        assert context.read_file_value('/proc/meminfo', r'^SwapTotal:\s*(\d+)') is None

    def test_first_text_skips_empty_files(self):
        connector = FakeConnector(files={
            '/sys/class/power_supply/BAT0/status': "\n",
            '/sys/class/power_supply/BAT1/status': "Charging\n",
        })
        assert make_context(connector).first_text('/sys/class/power_supply/BAT*/status') == "Charging"

    def test_report_without_blob(self):
        assert make_context(FakeConnector()).report('Host.name') is None

    def test_unknown_accessor(self):
        with pytest.raises(KeyError):
            get_source('no_such_accessor')


class TestDeviceSources:
    """Tests for dmidecode and free accessors"""

    def test_sum_memory_modules(self):
        assert sum_memory_modules(DMIDECODE_MEMORY) == 8192 + 8000

    def test_sum_memory_modules_empty_slots_only(self):
        assert sum_memory_modules("Memory Device\n\tSize: No Module Installed\n") is None

    def test_dmidecode_memory_total(self):
        connector = FakeConnector(commands={('dmidecode', '-t', 'memory'): DMIDECODE_MEMORY})
        assert call('dmidecode_memory_total', make_context(connector)) == "16192 MB"

    def test_dmidecode_product_name_skips_comments(self):
        connector = FakeConnector(commands={
            ('dmidecode', '-s', 'system-product-name'): "# SMBIOS entry point at 0x000f0000\n20XW0026US\n"
        })
        assert call('dmidecode_product_name', make_context(connector)) == "20XW0026US"

    def test_free_memory_total(self):
        output = ("               total        used        free\n"
                  "Mem:     16497614848  5308416000  8000000000\n"
                  "Swap:     2147483648           0  2147483648\n")
        connector = FakeConnector(commands={('free', '-b'): output})
        assert call('free_memory_total', make_context(connector)) == "16497614848"


class TestStorageSources:
    """Tests for lsblk and /sys/block accessors"""

    @pytest.fixture
    def lsblk_output(self):
        return json.dumps({"blockdevices": [
            {"name": "loop0", "size": 58363904, "type": "loop", "rota": False, "tran": None, "rm": False},
            {"name": "sda", "size": 32010928128, "type": "disk", "rota": False, "tran": "usb", "rm": True},
            {"name": "nvme0n1", "size": 512110190592, "type": "disk", "rota": False, "tran": "nvme", "rm": False},
        ]})

    def test_primary_disk_skips_loop_and_removable(self, lsblk_output):
        assert primary_lsblk_disk(lsblk_output)['name'] == "nvme0n1"

    def test_lsblk_type_and_size(self, lsblk_output):
        connector = FakeConnector(commands={tuple(LSBLK_ARGS): lsblk_output})
        context = make_context(connector, 'lsblk')
        assert call('lsblk_storage_type', context) == "NVMe SSD"
        assert call('lsblk_storage_size', context) == "512110190592"
        assert len(connector.executed) == 1

    def test_legacy_string_flags(self):
        output = json.dumps({"blockdevices": [
            {"name": "sda", "size": "1000204886016", "type": "disk", "rota": "1", "tran": "sata", "rm": "0"}
        ]})
        connector = FakeConnector(commands={tuple(LSBLK_ARGS): output})
        assert call('lsblk_storage_type', make_context(connector)) == "HDD"

    def test_invalid_lsblk_output(self):
        assert primary_lsblk_disk("lsblk: unknown column") is None
        assert primary_lsblk_disk("[]") is None

    def test_sysfs_disk(self):
        connector = FakeConnector(files={
            '/sys/block/loop0/size': "114000",
            '/sys/block/sda/size': "976773168",
            '/sys/block/sda/removable': "0",
            '/sys/block/sda/queue/rotational': "0",
        })
        context = make_context(connector)
        assert call('sysfs_storage_type', context) == "SSD"
        assert call('sysfs_storage_size', context) == "976773168"


class TestGpuSources:
    """Tests for lspci and DRM accessors"""

    def test_gpu_descriptions(self):
        assert gpu_descriptions(LSPCI_OUTPUT) == [
            "Intel Corporation TigerLake-LP GT2 [Iris Xe Graphics]",
            "NVIDIA Corporation GA107M [GeForce RTX 3050 Mobile]",
        ]

    def test_vendor_from_description(self):
        assert vendor_from_description("NVIDIA Corporation GA107M") == "NVIDIA"
        assert vendor_from_description("Advanced Micro Devices, Inc. [AMD/ATI] Cezanne") == "AMD"
        assert vendor_from_description("Intel Corporation UHD Graphics 620") == "Intel"
        assert vendor_from_description("ASPEED Technology, Inc. ASPEED Graphics Family") == "ASPEED"

    def test_kernel_driver(self):
        assert kernel_driver(LSPCI_K_OUTPUT) == "i915"

    def test_kernel_driver_unbound(self):
        output = "00:02.0 VGA compatible controller: Intel Corporation Device 9a49\n\tSubsystem: Lenovo Device 22d8\n"
        assert kernel_driver(output) is None

    def test_drm_vendor(self):
        connector = FakeConnector(files={
            '/sys/class/drm/card0-eDP-1/status': "connected",
            '/sys/class/drm/card0/device/vendor': "0x8086\n",
        })
        assert call('drm_gpu_vendor', make_context(connector)) == "Intel"


class TestDisplaySources:
    """Tests for screen size and resolution accessors"""

    def test_parse_xrandr(self):
        outputs = parse_xrandr(XRANDR_OUTPUT)
        assert [o['name'] for o in outputs] == ["eDP-1", "DP-2"]
        assert outputs[0] == {'name': "eDP-1", 'resolution': "1920x1200", 'width_mm': 344, 'height_mm': 193}

    def test_xrandr_first_connected_output(self):
        connector = FakeConnector(commands={('xrandr', '--current'): XRANDR_OUTPUT})
        context = make_context(connector, 'xrandr')
        assert call('xrandr_screen_size', context) == 15.5
        assert call('xrandr_resolution', context) == "1920x1200"

    def test_xrandr_zero_geometry_is_rejected(self):
        connector = FakeConnector(commands={('xrandr', '--current'): XRANDR_NO_SIZE})
        context = make_context(connector, 'xrandr')
        assert call('xrandr_screen_size', context) is None
        assert call('xrandr_resolution', context) == "1024x768"

    def test_parse_edid_decode(self):
        assert parse_edid_decode(EDID_DECODE_OUTPUT) == {
            'resolution': "1920x1200", 'width_mm': 344, 'height_mm': 193
        }

    def test_parse_edid_decode_image_size_fallback(self):
        text = "    Maximum image size: 60 cm x 34 cm\n"
        info = parse_edid_decode(text)
        assert (info['width_mm'], info['height_mm']) == (600, 340)
        assert info['resolution'] is None

    def test_edid_decode_accessor(self):
        path = '/sys/class/drm/card0-eDP-1/edid'
        edid = make_edid()
        fed = []

        def fake_edid_decode(args, input_text):
            fed.append(input_text)
            return EDID_DECODE_OUTPUT

        connector = FakeConnector(
            commands={('edid-decode',): fake_edid_decode},
            files={path: edid},
        )
        context = make_context(connector, 'edid-decode')
        assert call('edid_decode_screen_size', context) == 15.5
        assert call('edid_decode_resolution', context) == "1920x1200"
        assert fed == [edid_hex(edid)]
        assert bytes.fromhex(fed[0]) == edid

    def test_edid_blob_read_once(self):
        path = '/sys/class/drm/card0-eDP-1/edid'
        connector = FakeConnector(
            commands={('edid-decode',): EDID_DECODE_OUTPUT},
            files={path: make_edid()},
        )
        context = make_context(connector, 'edid-decode', 'sysfs_drm')
        call('edid_decode_screen_size', context)
        call('edid_decode_resolution', context)
        call('sysfs_edid_screen_size', context)
        assert connector.reads.count(path) == 1
        assert connector.executed == [('edid-decode',)]

    def test_edid_hex_lines(self):
        lines = edid_hex(make_edid()).splitlines()
        assert len(lines) == 8
        assert lines[0].startswith("00ffffffffffff00")
        assert all(len(line) == 32 for line in lines)

    def test_decode_raw_edid(self):
        assert decode_edid(make_edid()) == {'resolution': "1920x1200", 'width_mm': 344, 'height_mm': 193}

    def test_decode_raw_edid_large_panel(self):
        info = decode_edid(make_edid(h_active=3840, v_active=2160, h_mm=597, v_mm=336))
        assert info == {'resolution': "3840x2160", 'width_mm': 597, 'height_mm': 336}

    def test_decode_raw_edid_cm_fallback(self):
        info = decode_edid(make_edid(h_mm=0, v_mm=0))
        assert (info['width_mm'], info['height_mm']) == (340, 190)

    def test_decode_invalid_edid(self):
        assert decode_edid(b'') is None
        assert decode_edid(b'\x00' * 128) is None
        assert decode_edid(make_edid()[:100]) is None

    def test_sysfs_edid_skips_disconnected_connectors(self):
        connector = FakeConnector(files={
            '/sys/class/drm/card0-DP-1/edid': b'',
            '/sys/class/drm/card0-eDP-1/edid': make_edid(),
        })
        context = make_context(connector, 'sysfs_drm')
        assert call('sysfs_edid_screen_size', context) == 15.5
        assert call('sysfs_edid_resolution', context) == "1920x1200"

    def test_drm_modes(self):
        connector = FakeConnector(files={'/sys/class/drm/card0-eDP-1/modes': "1920x1200\n1280x800\n"})
        assert call('drm_modes_resolution', make_context(connector)) == "1920x1200"

    def test_report_display(self, report_blob):
        context = make_context(FakeConnector(), blob=report_blob)
        assert call('report_screen_size', context) == 15.5
        assert call('report_resolution', context) == "1920x1200"

    def test_report_display_zero_geometry(self):
        blob = json.dumps([{"type": "Display", "result": [
            {"output": {"width": 0, "height": 0}, "physical": {"width": 0, "height": 0}}
        ]}])
        context = make_context(FakeConnector(), blob=blob)
        assert call('report_screen_size', context) is None
        assert call('report_resolution', context) is None


class TestBatterySources:
    """Tests for upower and power_supply accessors"""

    def test_parse_upower_info(self):
        info = parse_upower_info(UPOWER_INFO)
        assert info['energy-full'] == "57 Wh"
        assert info['state'] == "discharging"

    def test_upower_accessors(self):
        connector = FakeConnector(commands=UPOWER_KEYS)
        context = make_context(connector, 'upower')
        assert round(call('upower_battery_capacity', context)) == 3701
        assert call('upower_battery_health_percent', context) == "Good"
        assert call('upower_battery_health_energy', context) == "Good"
        assert call('upower_battery_state', context) == "discharging"
        assert call('upower_battery_charge', context) == 87.0
        assert len(connector.executed) == 2

    def test_upower_without_battery(self):
        connector = FakeConnector(commands={('upower', '-e'): "/org/freedesktop/UPower/devices/line_power_AC\n"})
        context = make_context(connector, 'upower')
        assert call('upower_battery_capacity', context) is None
        assert call('upower_battery_state', context) is None

    def test_sysfs_energy_capacity(self):
        connector = FakeConnector(files={
            '/sys/class/power_supply/BAT0/energy_full': "57000000",
            '/sys/class/power_supply/BAT0/voltage_now': "15400000",
        })
        assert round(call('sysfs_battery_energy_capacity', make_context(connector))) == 3701

    def test_sysfs_energy_capacity_without_voltage(self):
        connector = FakeConnector(files={'/sys/class/power_supply/BAT0/energy_full': "57000000"})
        assert call('sysfs_battery_energy_capacity', make_context(connector)) is None

    def test_sysfs_health(self):
        connector = FakeConnector(files={
            '/sys/class/power_supply/BAT0/charge_full': "3200000",
            '/sys/class/power_supply/BAT0/charge_full_design': "5000000",
            '/sys/class/power_supply/BAT0/energy_full': "1",
            '/sys/class/power_supply/BAT0/energy_full_design': "0",
        })
        context = make_context(connector)
        assert call('sysfs_battery_health_charge', context) == "Fair"
        assert call('sysfs_battery_health_energy', context) is None

    @pytest.fixture
    def two_batteries(self):
        """BAT0 reports only part of its attributes; BAT1 has a full set"""
        return FakeConnector(files={
            '/sys/class/power_supply/BAT0/charge_full': "2000000",
            '/sys/class/power_supply/BAT0/energy_full': "57000000",
            '/sys/class/power_supply/BAT1/charge_full': "5000000",
            '/sys/class/power_supply/BAT1/charge_full_design': "5000000",
            '/sys/class/power_supply/BAT1/voltage_now': "7400000",
            '/sys/class/power_supply/BAT1/energy_full_design': "60000000",
            '/sys/class/power_supply/BAT1/status': "Charging",
            '/sys/class/power_supply/BAT1/capacity': "100",
        })

    def test_sysfs_values_come_from_one_battery(self, two_batteries):
        context = make_context(two_batteries)
        assert call('sysfs_battery_charge_full', context) == "2000000"
        assert call('sysfs_battery_health_charge', context) is None
        assert call('sysfs_battery_health_energy', context) is None
        assert call('sysfs_battery_energy_capacity', context) is None
        assert call('sysfs_battery_status', context) is None
        assert call('sysfs_battery_capacity', context) is None
        assert not any(path.startswith('/sys/class/power_supply/BAT1') for path in two_batteries.reads)

    def test_no_battery(self):
        connector = FakeConnector(files={'/sys/class/power_supply/AC/online': "1"})
        context = make_context(connector)
        assert call('sysfs_battery_status', context) is None
        assert call('sysfs_battery_health_charge', context) is None
