#!/usr/bin/env python3
"""
Crypto Agent Chat Client

Connects to the configured MCP servers and lets you chat with an LLM
that can call their tools.
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import Any, Dict

from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel

from cli.helper_functions import (
    create_default_config,
    load_server_config,
    save_results_to_file,
)
from llm.llm_client import PROVIDERS, LLMClient
from orchestrator import AgentOrchestrator, ChatError

logger = logging.getLogger(__name__)

# Constants
CONFIG_FILE = "config/servers.json"
DEFAULT_TIMEOUT = 30.0  # seconds

# Initialize Rich console for prettier output
console = Console()


async def connect_to_servers(
    orchestrator: AgentOrchestrator, config: Dict[str, Dict[str, Any]]
) -> bool:
    """
    Connect to all configured MCP servers.

    Args:
        orchestrator: The orchestrator instance
        config: Server configuration dictionary

    Returns:
        True if all servers connected successfully, False otherwise
    """
    success = True

    for server_name, server_config in config.items():
        try:
            tools = await orchestrator.add_server_connection(
                server_name,
                server_config["url"],
                transport=server_config.get("transport", "http"),
            )
            console.print(f"[green]Connected to {server_name}[/green] ({len(tools)} tools)")
        except (ChatError, ValueError) as e:
            logger.error(f"Failed to connect to {server_name}: {str(e)}")
            console.print(f"[bold red]Failed to connect to {server_name}:[/bold red] {str(e)}")
            success = False

    return success


def print_tools(orchestrator: AgentOrchestrator):
    tools = orchestrator.list_tools()
    if not tools:
        console.print("[yellow]No tools available[/yellow]")
        return

    for tool in tools:
        console.print(f"  • [bold]{tool.name}[/bold] ({tool.server_id}): {tool.description}")


def print_help():
    """Print available commands for interactive mode."""
    console.print(
        Panel.fit(
            "help                      - Show this help message\n"
            "servers                   - List connected servers\n"
            "tools                     - List available tools\n"
            "exit, quit                - Exit the program",
            title="Available Commands",
        )
    )


async def run_interactive_mode(orchestrator: AgentOrchestrator):
    """
    Run the client in interactive mode, prompting the user for messages.

    Args:
        orchestrator: The orchestrator instance
    """
    console.print(
        Panel.fit(
            "[bold blue]Crypto Agent[/bold blue]\n\n"
            "Type [bold green]'exit'[/bold green] or [bold green]'quit'[/bold green] to terminate\n"
            "Type [bold green]'help'[/bold green] for available commands",
            title="Interactive Mode",
        )
    )

    while True:
        try:
            command = console.input("\n[bold yellow]You:[/bold yellow] ").strip()

            if not command:
                continue

            if command.lower() in ("exit", "quit"):
                console.print("Goodbye!")
                break

            if command.lower() == "help":
                print_help()
                continue

            if command.lower() == "servers":
                console.print("\n[bold]Connected servers:[/bold]")
                for server_name, connection in orchestrator.connections.items():
                    console.print(f"- {server_name} ({connection.url})")
                continue

            if command.lower() == "tools":
                print_tools(orchestrator)
                continue

            with console.status("[bold green]Thinking...[/bold green]"):
                response = await orchestrator.chat(command)

            console.print(Panel(response, title="Assistant", title_align="left"))

        except ChatError as e:
            console.print(f"[bold red]Error:[/bold red] {str(e)}")
        except KeyboardInterrupt:
            console.print("\n[yellow]Operation cancelled.[/yellow]")
        except EOFError:
            break


async def main():
    """Main entry point for the chat client."""
    load_dotenv()

    parser = argparse.ArgumentParser(description="Crypto Agent chat client")
    parser.add_argument(
        "query", nargs="?", help="A single message to send (omit for interactive mode)"
    )
    parser.add_argument("--output", "-o", help="Save the answer to a file")
    parser.add_argument(
        "--config", "-c", default=CONFIG_FILE, help="Path to server configuration file"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=float(os.environ.get("CHAT_TIMEOUT", DEFAULT_TIMEOUT)),
        help="Timeout in seconds for one chat message, tool calls included",
    )
    parser.add_argument(
        "--max-tool-calls",
        type=int,
        default=int(os.environ.get("MAX_TOOL_CALLS", "10")),
        help="Maximum tool calls per message (default: 10)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    # LLM provider and model arguments
    llm_group = parser.add_argument_group("LLM Options")
    llm_group.add_argument(
        "--provider",
        default=os.environ.get("LLM_PROVIDER", "gemini"),
        choices=PROVIDERS,
        help="LLM provider to use (default: gemini)",
    )
    llm_group.add_argument(
        "--model",
        default=os.environ.get("LLM_MODEL"),
        help="Model to use with the selected provider",
    )
    llm_group.add_argument(
        "--api-base",
        default=os.environ.get("LLM_API_BASE"),
        help="Base URL for the API (for local/custom endpoints)",
    )
    llm_group.add_argument(
        "--api-key",
        default=os.environ.get("GEMINI_API_KEY"),
        help="API key if needed by the provider (default: $GEMINI_API_KEY)",
    )
    llm_group.add_argument(
        "--temperature",
        type=float,
        default=0.2,
        help="Temperature for response generation (0.0-1.0, default: 0.2)",
    )
    llm_group.add_argument(
        "--max-tokens",
        type=int,
        default=2048,
        help="Maximum tokens to generate in responses (default: 2048)",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.FileHandler("crypto-agent-client.log")],
    )

    try:
        console.print(f"[bold]Initializing {args.provider} LLM client...[/bold]")

        llm_client = await LLMClient.create(
            provider=args.provider,
            model=args.model,
            api_base=args.api_base,
            api_key=args.api_key,
            temperature=args.temperature,
            max_tokens=args.max_tokens,
        )

        console.print(
            f"[green]Successfully initialized {args.provider} with model {llm_client.model}[/green]"
        )

    except ValueError as e:
        console.print(f"[bold red]Error initializing LLM client:[/bold red] {str(e)}")
        return 1

    orchestrator = AgentOrchestrator(
        llm_client,
        max_tool_calls=args.max_tool_calls,
        chat_timeout=args.timeout,
    )

    try:
        if os.path.exists(args.config):
            config = load_server_config(args.config)
        else:
            logger.info(
                f"Configuration file not found. Creating default at {args.config}"
            )
            config = create_default_config(args.config)
    except (OSError, ValueError) as e:
        console.print(f"[bold red]Error loading {args.config}:[/bold red] {str(e)}")
        return 1

    console.print("[bold]Connecting to MCP servers...[/bold]")
    success = await connect_to_servers(orchestrator, config)
    if not success:
        logger.warning(
            "Some servers failed to connect. Continuing with available servers."
        )
    print_tools(orchestrator)

    if not args.query:
        await run_interactive_mode(orchestrator)
        return 0

    console.print(f"[bold]You:[/bold] {args.query}")

    try:
        with console.status("[bold green]Thinking...[/bold green]"):
            response = await orchestrator.chat(args.query)
    except ChatError as e:
        console.print(f"[bold red]Error:[/bold red] {str(e)}")
        return 1

    console.print(Panel(response, title="Assistant", title_align="left"))

    if args.output:
        file_path = save_results_to_file(
            {"query": args.query, "response": response}, args.output
        )
        console.print(f"[green]Results saved to {file_path}[/green]")

    return 0


def run():
    try:
        exit_code = asyncio.run(main())
        sys.exit(exit_code)
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user.[/yellow]")
        sys.exit(1)


if __name__ == "__main__":
    run()
