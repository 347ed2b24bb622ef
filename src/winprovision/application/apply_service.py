"""Service for applying declarative configuration documents"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from winprovision.domain.config.tool import ToolConfig
from winprovision.domain.errors import ProvisioningError
from winprovision.domain.models.results import ApplyResult
from winprovision.infrastructure.installer import Runner, ToolInstaller
from winprovision.infrastructure.process import run_command

logger = logging.getLogger(__name__)


class ApplyService:
    """Invokes an installed tool on a configuration document"""

    def __init__(
        self,
        tools: Dict[str, ToolConfig],
        installer: ToolInstaller,
        runner: Runner = run_command,
        timeout: Optional[float] = None,
    ):
        self.tools = tools
        self.installer = installer
        self.runner = runner
        self.timeout = timeout

    def build_command(self, executable: Path, tool: ToolConfig, document: Path, extra_args: List[str]) -> List[str]:
        args = [arg.replace("{document}", str(document)) for arg in tool.apply_args]
        return [str(executable), *args, *extra_args]

    def apply(self, tool_name: str, document: Path, extra_args: Optional[List[str]] = None) -> ApplyResult:
        """Apply a document with a tool

        Args:
            tool_name: Configured tool name
            document: Path to the configuration document
            extra_args: Arguments appended after the configured apply_args

        Returns:
            ApplyResult of a successful run

        Raises:
            ValueError: If the tool is not configured
            FileNotFoundError: If the document does not exist
            ProvisioningError: If the tool is not installed
            ToolInvocationError: If the tool exits non-zero
        """
        if tool_name not in self.tools:
            available = ", ".join(self.tools.keys())
            raise ValueError(f"Unknown tool: {tool_name}. Available tools: {available}")
        tool = self.tools[tool_name]

        document = Path(document).resolve()
        if not document.is_file():
            raise FileNotFoundError(f"Document not found: {document}")

        executable = self.installer.find_executable(tool_name, tool)
        if executable is None:
            raise ProvisioningError(
                f"{tool_name} is not installed. Run 'winprovision install {tool_name}' first."
            )

        command = self.build_command(executable, tool, document, list(extra_args or []))
        logger.info(f"Applying {document.name} with {tool_name}")
        result = self.runner(command, timeout=self.timeout)
        logger.info(f"{tool_name} finished applying {document.name}")
        return ApplyResult(
            tool=tool_name,
            document=str(document),
            exit_code=result.exit_code,
            output=result.output,
        )
