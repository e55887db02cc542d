"""MCP server exposing container provisioning to MCP clients.

Usage:
    # Defaults (python:3.12-slim-bookworm, 5 minute pull budget)
    code-sandbox-mcp

    # YAML config file
    code-sandbox-mcp --config ./sandbox.yaml

    # With Claude Code
    claude mcp add code-sandbox -- code-sandbox-mcp

Without --config, settings come from SANDBOX_* environment variables.
The Docker daemon is located via DOCKER_HOST, then well-known sockets.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

import yaml
from fastmcp import FastMCP

from code_sandbox.container import Provisioner, ProvisionerConfig
from code_sandbox.container.config import parse_pull_timeout
from code_sandbox.errors import ConfigurationError
from code_sandbox.types import ProvisionRequest

mcp = FastMCP("code-sandbox")

# Global provisioner - replaced in main() before mcp.run()
_provisioner = Provisioner()


async def initialize_environment(image: str = "") -> str:
    """Initialize a fresh container for running code.

    Creates and starts a Docker container with an interactive shell and
    /app as working directory. The image is pulled first if it is not
    available locally.

    Args:
        image: Docker image to use (default: python:3.12-slim-bookworm)

    Returns "container_id: <id>" on success, or "Error: <message>".
    """
    result = await _provisioner.provision(ProvisionRequest.from_arguments({"image": image}))
    return result.to_text()


mcp.tool(initialize_environment)


def load_config(args: argparse.Namespace) -> ProvisionerConfig:
    """Build provisioner config from CLI args, YAML file and environment."""
    if args.config:
        config = ProvisionerConfig.from_yaml(Path(args.config))
    else:
        config = ProvisionerConfig.from_env()

    if args.default_image:
        config.default_image = args.default_image
    if args.pull_timeout is not None:
        config.pull_timeout = parse_pull_timeout("--pull-timeout", args.pull_timeout)
    return config


def main() -> None:
    parser = argparse.ArgumentParser(
        description="MCP server that provisions Docker sandboxes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Environment configuration
  SANDBOX_PULL_TIMEOUT=120 code-sandbox-mcp

  # YAML configuration
  code-sandbox-mcp --config ./sandbox.yaml

  # Add to Claude Code
  claude mcp add code-sandbox -- code-sandbox-mcp
        """,
    )

    parser.add_argument("--config", help="Path to YAML config file")
    parser.add_argument("--default-image", help="Image used when none is requested")
    parser.add_argument(
        "--pull-timeout",
        type=float,
        help="Seconds allowed for pulling a missing image (default and maximum: 300)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)",
    )

    args = parser.parse_args()

    # stdout carries the stdio transport; logs go to stderr
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args)
    except (ConfigurationError, OSError, yaml.YAMLError) as e:
        parser.error(str(e))

    global _provisioner
    _provisioner = Provisioner(config)

    # Run MCP server (stdio transport by default)
    mcp.run()


if __name__ == "__main__":
    main()
