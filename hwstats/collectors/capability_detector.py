# hwstats/collectors/capability_detector.py
"""
Source Capability Detection
Works out once per run which inventory tools and kernel pseudo-files are usable.
"""

from typing import Dict, List, Optional
import logging

from ..models import SystemCapabilities

# Structured report tool; its JSON output is cached during detection
REPORT = 'report'
JQ = 'jq'
LSBLK = 'lsblk'
LSPCI = 'lspci'
XRANDR = 'xrandr'
EDID_DECODE = 'edid-decode'
UPOWER = 'upower'
DMIDECODE = 'dmidecode'
FREE = 'free'

SYSFS_DMI = 'sysfs_dmi'
PROC_CPUINFO = 'proc_cpuinfo'
PROC_MEMINFO = 'proc_meminfo'
SYSFS_BLOCK = 'sysfs_block'
SYSFS_POWER_SUPPLY = 'sysfs_power_supply'
SYSFS_DRM = 'sysfs_drm'

# Source name -> executable looked up on PATH
TOOL_SOURCES: Dict[str, str] = {
    JQ: 'jq',
    LSBLK: 'lsblk',
    LSPCI: 'lspci',
    XRANDR: 'xrandr',
    EDID_DECODE: 'edid-decode',
    UPOWER: 'upower',
    DMIDECODE: 'dmidecode',
    FREE: 'free',
}

# Source name -> glob that must match at least one path
PSEUDO_FILE_SOURCES: Dict[str, str] = {
    SYSFS_DMI: '/sys/class/dmi/id/*',
    PROC_CPUINFO: '/proc/cpuinfo',
    PROC_MEMINFO: '/proc/meminfo',
    SYSFS_BLOCK: '/sys/block/*',
    SYSFS_POWER_SUPPLY: '/sys/class/power_supply/*',
    SYSFS_DRM: '/sys/class/drm/card*',
}

# Report modules requested from the report tool, in output order
REPORT_MODULES = ('Host', 'CPU', 'Memory', 'GPU', 'Display', 'Battery')

ALL_SOURCES: List[str] = [REPORT] + list(TOOL_SOURCES) + list(PSEUDO_FILE_SOURCES)


class CapabilityDetector:
    """
    Detects which data sources are usable on this host.
    All detection is read-only; a failed probe marks the source absent and
    never aborts the run.
    """

    def __init__(self, connector, sources_config=None):
        """
        Initialize capability detector

        Args:
            connector: LocalConnector (or compatible) instance
            sources_config: Optional SourcesConfig with disabled sources and
                the report tool command
        """
        self.connector = connector
        self.sources_config = sources_config
        self.logger = logging.getLogger('capability_detector')

    def detect_all(self) -> SystemCapabilities:
        """
        Run all detection checks

        Returns:
            SystemCapabilities: Detected sources plus the cached report blob
        """
        self.logger.info("Starting source capability detection")
        available = set()

        for name, binary in TOOL_SOURCES.items():
            if self._is_enabled(name) and self._detect_tool(name, binary):
                available.add(name)

        for name, pattern in PSEUDO_FILE_SOURCES.items():
            if self._is_enabled(name) and self._detect_pseudo_file(name, pattern):
                available.add(name)

        report_blob = None
        if self._is_enabled(REPORT):
            report_blob = self._fetch_report()
            if report_blob is not None:
                available.add(REPORT)

        caps = SystemCapabilities(available=frozenset(available), report_blob=report_blob)
        self._log_detection_summary(caps)
        return caps

    def _is_enabled(self, name: str) -> bool:
        if self.sources_config is None:
            return True
        if name in self.sources_config.disabled:
            self.logger.debug(f"Source {name} disabled by configuration")
            return False
        return True

    def _detect_tool(self, name: str, binary: str) -> bool:
        """Detect if a tool is resolvable on PATH"""
        found = self.connector.which(binary) is not None
        if found:
            self.logger.debug(f"Detected {name}")
        return found

    def _detect_pseudo_file(self, name: str, pattern: str) -> bool:
        """Detect if a pseudo-file source exists"""
        found = bool(self.connector.glob(pattern))
        if found:
            self.logger.debug(f"Detected {name} ({pattern})")
        return found

    def _report_command(self) -> List[str]:
        if self.sources_config is not None:
            return list(self.sources_config.report_command)
        return ['fastfetch']

    def _fetch_report(self) -> Optional[str]:
        """Run the report tool once and keep its output for every field"""
        command = self._report_command()
        if self.connector.which(command[0]) is None:
            return None

        args = command + ['--structure', ':'.join(REPORT_MODULES), '--format', 'json']
        result = self.connector.execute_command(args)
        if not result.success:
            self.logger.info(f"Report tool failed (exit {result.exit_code}), ignoring it")
            return None
        if not result.output.strip():
            self.logger.info("Report tool produced no output, ignoring it")
            return None

        self.logger.debug(f"Cached {len(result.output)} bytes of report output")
        return result.output

    def _log_detection_summary(self, caps: SystemCapabilities):
        """Log summary of detected capabilities"""
        self.logger.info("=" * 60)
        self.logger.info("Capability Detection Summary:")
        self.logger.info(f"  Report tool: {'cached' if caps.has(REPORT) else 'unavailable'}")
        self.logger.info(f"  Extractor: {'jq' if caps.has(JQ) else 'pattern'}")

        tools = [name for name in TOOL_SOURCES if caps.has(name)]
        files = [name for name in PSEUDO_FILE_SOURCES if caps.has(name)]
        self.logger.info(f"  Tools: {', '.join(tools) if tools else 'none'}")
        self.logger.info(f"  Pseudo-files: {', '.join(files) if files else 'none'}")
        self.logger.info("=" * 60)
