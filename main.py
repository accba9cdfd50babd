"""
Console client for the intake assistant

Authenticates once, then runs a line-oriented chat loop over SessionDriver.
"""

import argparse
import logging
import sys

from intake_console.config import ClientConfig
from intake_console.core.session_driver import SessionDriver
from intake_console.results import TurnKind
from intake_console.utils.conversation_modes import Mode, VALID_MODES
from intake_console.utils.display_helpers import format_json_reply
from intake_console.utils.gigachat_client import AuthenticationError, GigaChatClient

logger = logging.getLogger(__name__)

ASSISTANT_LABEL = "GigaChat"

COMMAND_HELP = {
    Mode.PLAIN: "Type 'exit' to quit, 'clear' to reset the history.",
    Mode.STRUCTURED_JSON: "Type 'exit' to quit, 'clear' to reset the history, 'json' to toggle JSON answers.",
    Mode.GUIDED_INTAKE: "Type 'exit' to quit, 'clear' to start over, 'summary' to see the collected data.",
}


def print_separator(char="=", length=60):
    """Print a separator line"""
    print(char * length)


def print_assistant(text):
    print(f"{ASSISTANT_LABEL}: {text}\n")


def render_result(result):
    """Print one TurnResult to the console"""
    if result.kind == TurnKind.IGNORED:
        return

    if result.kind == TurnKind.ERROR:
        print(f"{result.output}\n")
        return

    if result.kind == TurnKind.REPLY:
        if result.mode == Mode.STRUCTURED_JSON:
            pretty = format_json_reply(result.output)
            print_assistant(pretty if pretty is not None else result.output)
        else:
            print_assistant(result.output)

        if result.is_final and result.mode == Mode.GUIDED_INTAKE:
            print("[Intake complete. Type 'summary' to see the collected data.]\n")
        return

    print(f"{result.output}\n")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="GigaChat console client")
    parser.add_argument(
        "--mode",
        choices=sorted(VALID_MODES),
        default=None,
        help="Starting mode (default: INTAKE_MODE or plain)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv=None):
    """Run console client"""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    print_separator()
    print("GIGACHAT CONSOLE CLIENT")
    print_separator()

    # Configuration and authentication failures are fatal: report once and
    # never enter the loop
    print("\nAuthorizing...")
    client = None
    try:
        config = ClientConfig.from_env()
        config.validate()
        client = GigaChatClient(config)
        client.authenticate()
    except (AuthenticationError, ValueError) as e:
        if client is not None:
            client.close()
        print(f"Error: {e}")
        return 1
    print("Authorization successful!\n")

    variant = Mode(args.mode) if args.mode else config.mode

    driver = SessionDriver(client, variant=variant, max_tokens=config.max_tokens)

    print(f"Chat started in {variant.value} mode.")
    print(COMMAND_HELP[variant] + "\n")

    start = driver.start()
    if start.output:
        print_assistant(start.output)

    try:
        while True:
            try:
                user_input = input("You: ")
            except EOFError:
                print()
                break

            result = driver.handle_input(user_input)
            render_result(result)

            if result.terminated:
                break

    except KeyboardInterrupt:
        print("\n\nSession interrupted by user (Ctrl+C)")
    finally:
        client.close()

    print_separator()
    print("Session closed")
    print_separator()
    return 0


if __name__ == '__main__':
    sys.exit(main())
