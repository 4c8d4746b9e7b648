"""
MCP Server Implementation
========================

Model Context Protocol server exposing the lint engine to assistants.
Implements the tools lint_html, list_rules and explain_rule, plus
read-only resources for the rule catalogue, presets and health.
"""

import asyncio
import json
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone

from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.types import Resource, TextContent, Tool, LoggingLevel

from html_linter import __version__
from html_linter.config.settings import get_settings
from html_linter.config.logging import get_logger
from html_linter.core.engine.config import PRESETS, load_config
from html_linter.core.engine.linter import lint_html
from html_linter.core.errors import LintConfigError, SourceTooLargeError, UnknownRuleError
from html_linter.core.reporting import FormatterFactory
from html_linter.core.rules import registry
from html_linter.models.schemas import LintReport, RuleCategory, SourceType

logger = get_logger(__name__)

SERVER_NAME = "html-lint-mcp"

RESOURCE_RULES = "lint://rules"
RESOURCE_PRESETS = "lint://presets"
RESOURCE_HEALTH = "lint://status/health"


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _text(payload: Dict[str, Any]) -> List[TextContent]:
    return [TextContent(type="text", text=json.dumps(payload, indent=2, default=str))]


def _failure(error: str, **extra: Any) -> List[TextContent]:
    return _text({"success": False, "error": error, **extra, "timestamp": _timestamp()})


class HTMLLintMCPServer:
    """MCP Server for HTML linting."""

    def __init__(self) -> None:
        self.settings = get_settings()
        self.logger: Any = logger.bind(component="mcp_server")
        self.server = Server(SERVER_NAME)
        self._setup_tools()
        self._setup_resources()
        self._setup_handlers()

    def _setup_tools(self) -> None:
        """Setup MCP tools."""

        @self.server.list_tools()
        async def handle_list_tools() -> List[Tool]:
            """List available MCP tools."""
            return [
                Tool(
                    name="lint_html",
                    description="Lint an HTML document, fragment or Markdown note with html blocks",
                    inputSchema={
                        "type": "object",
                        "properties": {
                            "html": {"type": "string", "description": "Source text to lint"},
                            "filename": {
                                "type": "string",
                                "description": "Name used in diagnostics; .md selects Markdown",
                                "default": "<input>",
                            },
                            "source_type": {
                                "type": "string",
                                "enum": [s.value for s in SourceType],
                                "description": "Override source type detection",
                            },
                            "config": {
                                "type": "object",
                                "description": "Lint configuration (extends, rules, report_unused_disables)",
                            },
                            "format": {
                                "type": "string",
                                "enum": FormatterFactory.available_formats(),
                                "description": "Also render a report in this format",
                                "default": "json",
                            },
                        },
                        "required": ["html"],
                    },
                ),
                Tool(
                    name="list_rules",
                    description="List available lint rules",
                    inputSchema={
                        "type": "object",
                        "properties": {
                            "category": {
                                "type": "string",
                                "enum": [c.value for c in RuleCategory],
                                "description": "Only rules in this category",
                            }
                        },
                    },
                ),
                Tool(
                    name="explain_rule",
                    description="Describe a lint rule, its default severity and options",
                    inputSchema={
                        "type": "object",
                        "properties": {"rule_id": {"type": "string", "description": "Rule identifier"}},
                        "required": ["rule_id"],
                    },
                ),
            ]

        self._list_tools_handler = handle_list_tools

        @self.server.call_tool()
        async def handle_call_tool(name: str, arguments: Dict[str, Any]) -> List[TextContent]:  # type: ignore[misc]
            """Handle tool execution."""
            return await self.call_tool(name, arguments)

    def _setup_resources(self) -> None:
        """Setup MCP resources."""

        @self.server.list_resources()
        async def handle_list_resources() -> List[Resource]:  # type: ignore[misc]
            """List available resources."""
            return self.list_resources()

        @self.server.read_resource()  # type: ignore[arg-type]
        async def handle_read_resource(uri: Any) -> str:  # type: ignore[misc]
            """Read resource content."""
            return await self.read_resource(str(uri))

    def _setup_handlers(self) -> None:
        """Setup additional MCP handlers."""

        @self.server.set_logging_level()
        async def handle_set_logging_level(level: LoggingLevel) -> None:  # type: ignore[misc]
            """Handle logging level changes."""
            self.logger.info("Logging level changed", level=level)

    # Public API, also used by tests
    async def get_tools(self) -> List[Tool]:
        """Get list of available MCP tools."""
        return await self._list_tools_handler()

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> List[TextContent]:
        """Run a tool; failures are returned as JSON with success=false."""
        arguments = arguments or {}
        self.logger.info("Tool called", tool=name, arguments=sorted(arguments))
        try:
            if name == "lint_html":
                return await self._handle_lint_html(arguments)
            elif name == "list_rules":
                return await self._handle_list_rules(arguments)
            elif name == "explain_rule":
                return await self._handle_explain_rule(arguments)
            else:
                self.logger.error("Tool not found", tool=name)
                return _failure(f"Unknown tool: {name}")
        except LintConfigError as e:
            self.logger.warning("Invalid lint configuration", tool=name, errors=e.errors)
            return _failure("Invalid lint configuration", errors=e.errors)
        except (ValueError, SourceTooLargeError, UnknownRuleError) as e:
            self.logger.warning("Tool rejected arguments", tool=name, error=str(e))
            return _failure(str(e))
        except Exception as e:
            self.logger.error("Tool execution error", tool=name, error=str(e), exc_info=True)
            return _failure(f"Tool execution failed: {e}")

    def list_resources(self) -> List[Resource]:
        return [
            Resource(
                uri=RESOURCE_RULES,  # type: ignore[arg-type]
                name="Lint Rules",
                description="Every registered rule with category, severity and options",
                mimeType="application/json",
            ),
            Resource(
                uri=RESOURCE_PRESETS,  # type: ignore[arg-type]
                name="Lint Presets",
                description="Presets usable in the extends setting",
                mimeType="application/json",
            ),
            Resource(
                uri=RESOURCE_HEALTH,  # type: ignore[arg-type]
                name="Server Health Status",
                description="Server health and loaded rule count",
                mimeType="application/json",
            ),
        ]

    async def read_resource(self, uri: str) -> str:
        if uri == RESOURCE_RULES:
            return json.dumps([info.model_dump(mode="json") for info in registry.info()], indent=2)
        elif uri == RESOURCE_PRESETS:
            return json.dumps(PRESETS, indent=2)
        elif uri == RESOURCE_HEALTH:
            return await self._get_health_status()
        else:
            raise ValueError(f"Unknown resource URI: {uri}")

    # Tool handlers
    async def _handle_lint_html(self, arguments: Dict[str, Any]) -> List[TextContent]:
        content = arguments.get("html")
        if not content or not str(content).strip():
            raise ValueError("html is required")

        size = len(content.encode("utf-8"))
        if size > self.settings.max_source_bytes:
            raise SourceTooLargeError(size, self.settings.max_source_bytes)

        output_format = arguments.get("format") or "json"
        formatter = FormatterFactory.create_formatter(output_format)
        config = load_config(arguments["config"], source="config") if arguments.get("config") else None

        result = await lint_html(
            content,
            config=config,
            filename=arguments.get("filename") or "<input>",
            source_type=arguments.get("source_type"),
        )
        payload: Dict[str, Any] = {
            "success": True,
            "passed": result.error_count == 0,
            "result": result.model_dump(mode="json"),
        }
        if output_format != "json":
            payload["report"] = formatter.format(LintReport(results=[result]))

        self.logger.info(
            "Lint tool completed",
            filename=result.filename,
            errors=result.error_count,
            warnings=result.warning_count,
        )
        return _text(payload)

    async def _handle_list_rules(self, arguments: Dict[str, Any]) -> List[TextContent]:
        category = arguments.get("category")
        infos = registry.info(RuleCategory(category) if category else None)
        return _text(
            {
                "success": True,
                "total": len(infos),
                "rules": [info.model_dump(mode="json") for info in infos],
            }
        )

    async def _handle_explain_rule(self, arguments: Dict[str, Any]) -> List[TextContent]:
        rule_id = arguments.get("rule_id")
        if not rule_id:
            raise ValueError("rule_id is required")
        rule = registry.get(rule_id)
        info = rule.info().model_dump(mode="json")
        info["tags"] = sorted(rule.tags) if rule.tags is not None else None
        info["options_schema"] = rule.options_schema
        info["doc"] = (rule.__doc__ or "").strip() or None
        return _text({"success": True, "rule": info})

    async def _get_health_status(self) -> str:
        status = {
            "status": "healthy" if len(registry) else "unhealthy",
            "timestamp": _timestamp(),
            "version": __version__,
            "rules_loaded": len(registry),
            "default_preset": self.settings.default_preset,
        }
        return json.dumps(status, indent=2)

    async def run(self) -> None:
        """Run the MCP server over stdio."""
        from mcp.server.stdio import stdio_server

        async with stdio_server() as (read_stream, write_stream):
            self.logger.info("MCP server starting with stdio transport")
            await self.server.run(
                read_stream,
                write_stream,
                InitializationOptions(
                    server_name=SERVER_NAME,
                    server_version=__version__,
                    capabilities=self.server.get_capabilities(
                        notification_options=NotificationOptions(),
                        experimental_capabilities={},
                    ),
                ),
            )


async def serve() -> None:
    await HTMLLintMCPServer().run()


def main() -> None:
    """Main entry point for the MCP server."""
    asyncio.run(serve())


if __name__ == "__main__":
    main()
