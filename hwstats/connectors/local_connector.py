# hwstats/connectors/local_connector.py
"""
Local connector for running inventory tools and reading pseudo-files.
Failures are reported through CommandResult / None, never raised.
"""

import glob as globmod
import logging
import shutil
import subprocess
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence


@dataclass
class CommandResult:
    """Result of local command execution"""
    success: bool
    output: str = ""
    error: str = ""
    exit_code: int = 0
    execution_time: float = 0.0
    command: str = ""


class LocalConnector:
    """
    Executes commands and reads files on the local host.
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout
        self.logger = logging.getLogger('local_connector')

    def execute_command(self, args: Sequence[str], input_text: str = None,
                        timeout: float = None, log_command: bool = True) -> CommandResult:
        """
        Run a command without a shell.

        Args:
            args: Program and arguments
            input_text: Text fed to the command's stdin
            timeout: Seconds before giving up (connector default if None)
            log_command: Whether to log the command being executed

        Returns:
            CommandResult: Command execution result
        """
        command = ' '.join(args)
        if timeout is None:
            timeout = self.timeout

        start_time = time.time()
        try:
            if log_command:
                self.logger.debug(f"Executing: {command}")

            completed = subprocess.run(
                list(args),
                input=input_text,
                capture_output=True,
                text=True,
                errors='replace',
                timeout=timeout
            )
            execution_time = time.time() - start_time
            success = completed.returncode == 0

            if not success:
                self.logger.debug(
                    f"Command '{self._truncate_command(command)}' exited with {completed.returncode}: "
                    f"{completed.stderr.strip()[:200]}"
                )

            return CommandResult(
                success=success,
                output=completed.stdout,
                error=completed.stderr,
                exit_code=completed.returncode,
                execution_time=execution_time,
                command=command
            )

        except subprocess.TimeoutExpired:
            execution_time = time.time() - start_time
            error_msg = f"Command '{self._truncate_command(command)}' timed out after {execution_time:.2f}s"
            self.logger.warning(error_msg)
            return CommandResult(False, error=error_msg, exit_code=-1,
                                 execution_time=execution_time, command=command)

        except OSError as e:
            execution_time = time.time() - start_time
            error_msg = f"Command '{self._truncate_command(command)}' execution failed: {e}"
            self.logger.debug(error_msg)
            return CommandResult(False, error=error_msg, exit_code=-1,
                                 execution_time=execution_time, command=command)

    def read_file(self, path: str) -> Optional[bytes]:
        """Read a pseudo-file; missing or unreadable paths give None"""
        try:
            with open(path, 'rb') as f:
                return f.read()
        except OSError as e:
            self.logger.debug(f"Cannot read {path}: {e}")
            return None

    def glob(self, pattern: str) -> List[str]:
        return sorted(globmod.glob(pattern))

    def which(self, name: str) -> Optional[str]:
        return shutil.which(name)

    @staticmethod
    def _truncate_command(command: str, max_length: int = 100) -> str:
        if len(command) <= max_length:
            return command
        return command[:max_length - 3] + "..."
