"""
Command-line interface for the DocuWriter.ai MCP server.

    docuwriter-mcp                 start the MCP server (stdio)
    docuwriter-mcp start           same
    docuwriter-mcp install [env]   install assistant rules (cursor, claude, vscode, all)
    docuwriter-mcp cursor          shorthand for `install cursor`
"""

import argparse
import json
import shutil
import sys
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import structlog

from docuwriter_mcp.errors import DocuWriterMCPError

logger = structlog.get_logger(__name__)

SERVER_KEY = "docuwriter"
RULE_FILENAME = "docuwriter-mcp.md"
PROJECT_MARKERS = ("package.json", "composer.json", ".git", "pyproject.toml", "Cargo.toml", "go.mod")


class InstallError(DocuWriterMCPError):
    """Rule or config installation failed."""


@dataclass(frozen=True)
class Environment:
    """An assistant that can receive rule files and an MCP server stanza."""

    key: str
    name: str
    source_file: str
    target_path: str
    description: str
    config_path: str
    servers_key: str


ENVIRONMENTS: Dict[str, Environment] = {
    "cursor": Environment(
        key="cursor",
        name="Cursor",
        source_file="cursor.md",
        target_path=f".cursor/rules/{RULE_FILENAME}",
        description="Cursor AI assistant rules",
        config_path=".cursor/mcp.json",
        servers_key="mcpServers",
    ),
    "claude": Environment(
        key="claude",
        name="Claude",
        source_file="claude.md",
        target_path=f".claude/rules/{RULE_FILENAME}",
        description="Claude AI assistant rules",
        config_path=".mcp.json",
        servers_key="mcpServers",
    ),
    "vscode": Environment(
        key="vscode",
        name="Visual Studio Code",
        source_file="vscode.md",
        target_path=f".vscode/ai-rules/{RULE_FILENAME}",
        description="VS Code AI extension rules",
        config_path=".vscode/mcp.json",
        servers_key="servers",
    ),
}

SERVER_STANZA: Dict[str, Any] = {
    "command": "docuwriter-mcp",
    "args": ["start"],
    "env": {"DOCUWRITER_API_TOKEN": "YOUR_DOCUWRITER_API_TOKEN"},
}


# ─── Installation ────────────────────────────────────────────────────────────


def find_project_root(start: Optional[Path] = None) -> Path:
    """Nearest ancestor of ``start`` (default: cwd) that looks like a project root."""
    start = (start or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        if any((directory / marker).exists() for marker in PROJECT_MARKERS):
            return directory
    return start


def rules_source() -> Path:
    """Directory holding the bundled rule files."""
    path = Path(str(resources.files("docuwriter_mcp") / "rules"))
    if not path.is_dir():
        raise InstallError("Could not find DocuWriter.ai rules source directory")
    return path


def install_rule(env_key: str, project_root: Path, source_dir: Optional[Path] = None) -> Path:
    """Copy the rule file for ``env_key`` into the project. Returns the target path."""
    env = ENVIRONMENTS.get(env_key)
    if env is None:
        raise InstallError(f"Unknown environment: {env_key}")

    source = (source_dir or rules_source()) / env.source_file
    if not source.is_file():
        raise InstallError(f"Source rule file not found: {source}")

    target = project_root / env.target_path
    if not target.parent.exists():
        print(f"Creating directory: {target.parent}")
        target.parent.mkdir(parents=True)
    if target.exists():
        print(f"{env.name} rule already exists. Updating...")

    shutil.copyfile(source, target)
    logger.info("rule_installed", environment=env_key, target=str(target))
    print(f"{env.name} rules installed: {target.relative_to(project_root)}")
    return target


def merge_server_config(env_key: str, project_root: Path) -> Path:
    """Add or refresh the DocuWriter.ai server entry in the assistant's MCP config.

    Other servers in the file are left untouched; ``env`` values of an
    existing DocuWriter.ai entry (such as a real token) are kept.
    """
    env = ENVIRONMENTS[env_key]
    config_file = project_root / env.config_path

    config: Dict[str, Any] = {}
    if config_file.exists():
        try:
            config = json.loads(config_file.read_text(encoding="utf-8") or "{}")
        except ValueError as e:
            raise InstallError(f"{config_file} is not valid JSON: {e}") from e
        if not isinstance(config, dict):
            raise InstallError(f"{config_file} must contain a JSON object")

    servers = config.setdefault(env.servers_key, {})
    if not isinstance(servers, dict):
        raise InstallError(f"'{env.servers_key}' in {config_file} must be a JSON object")

    stanza = json.loads(json.dumps(SERVER_STANZA))
    previous = servers.get(SERVER_KEY)
    if isinstance(previous, dict) and isinstance(previous.get("env"), dict):
        stanza["env"].update(previous["env"])
    servers[SERVER_KEY] = stanza

    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(json.dumps(config, indent=2) + "\n", encoding="utf-8")
    logger.info("server_config_merged", environment=env_key, config=str(config_file))
    print(f"{env.name} MCP server configured: {config_file.relative_to(project_root)}")
    return config_file


def prompt_for_environment() -> str:
    """Ask which environment to install for. Invalid answers fall back to Cursor."""
    keys = list(ENVIRONMENTS)
    print("\nAvailable environments:")
    for index, key in enumerate(keys, start=1):
        env = ENVIRONMENTS[key]
        print(f"  {index}. {env.name} - {env.description}")
    print(f"  {len(keys) + 1}. All environments\n")

    try:
        answer = input(f"Choose an environment (1-{len(keys) + 1}): ")
    except EOFError:
        answer = ""

    try:
        choice = int(answer.strip())
    except ValueError:
        choice = 0
    if 1 <= choice <= len(keys):
        return keys[choice - 1]
    if choice == len(keys) + 1:
        return "all"
    print("Invalid selection. Installing for Cursor by default.")
    return "cursor"


def install(environment: Optional[str], configure: bool = False, project_root: Optional[Path] = None) -> List[Path]:
    """Install rules (and optionally server config) for one or all environments."""
    project_root = project_root or find_project_root()
    source_dir = rules_source()
    print(f"Project root detected: {project_root}")

    if not environment:
        environment = prompt_for_environment()

    keys = list(ENVIRONMENTS) if environment == "all" else [environment]
    installed: List[Path] = []
    for key in keys:
        try:
            installed.append(install_rule(key, project_root, source_dir))
            if configure:
                installed.append(merge_server_config(key, project_root))
        except (InstallError, OSError) as e:
            if environment != "all":
                raise
            name = ENVIRONMENTS[key].name
            logger.warning("rule_install_failed", environment=key, error=str(e))
            print(f"Failed to install {name} rules: {e}")

    if installed:
        print("\nInstallation complete. Next steps:")
        print("  1. Set your DOCUWRITER_API_TOKEN environment variable")
        if not configure:
            print("  2. Configure the MCP server in your AI assistant (or rerun with --configure)")
    else:
        print("No rules were installed successfully.")
    return installed


# ─── Argument Parsing ────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docuwriter-mcp",
        description="DocuWriter.ai MCP server and assistant rule installer",
        epilog="Environment: DOCUWRITER_API_TOKEN (required by the server), "
        "DOCUWRITER_API_URL, DOCUWRITER_LOG_LEVEL",
    )
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("start", help="Start the MCP server on stdio (default)")

    install_parser = subparsers.add_parser("install", help="Install AI assistant rules")
    install_parser.add_argument(
        "environment",
        nargs="?",
        choices=[*ENVIRONMENTS, "all"],
        help="Target environment (prompted when omitted)",
    )
    install_parser.add_argument(
        "--configure",
        action="store_true",
        help="Also add the server to the assistant's MCP configuration file",
    )
    install_parser.add_argument(
        "--project-root",
        type=Path,
        help="Install into this directory instead of the detected project root",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point for the docuwriter-mcp command."""
    args_list = list(sys.argv[1:] if argv is None else argv)
    if args_list and (args_list[0] in ENVIRONMENTS or args_list[0] == "all"):
        args_list.insert(0, "install")

    args = build_parser().parse_args(args_list)

    if args.command == "install":
        from docuwriter_mcp.logging_config import configure_logging

        configure_logging("WARNING", format_type="pretty")
        try:
            install(args.environment, configure=args.configure, project_root=args.project_root)
        except (InstallError, OSError) as e:
            print(f"Installation failed: {e}", file=sys.stderr)
            sys.exit(1)
        return

    from docuwriter_mcp.server import run

    run()


if __name__ == "__main__":
    main()
