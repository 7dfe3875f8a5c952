"""Terminal front-end for the shop chat client."""

import argparse
import getpass
import sys

from shopchat.config import load_env
from shopchat.logger import setup_logger

QUIT_COMMANDS = {'quit', 'exit', 'q'}


def authenticate(controller) -> bool:
    """Prompt for login or registration until logged in. False if the user quits."""
    while not controller.session.authenticated:
        mode = "register" if controller.session.registering else "login"
        print(f"\n[{mode}] Enter credentials, '/switch' to toggle login/register, 'quit' to exit.")
        username = input("Username: ").strip()
        if username.lower() in QUIT_COMMANDS:
            return False
        if username == "/switch":
            controller.toggle_mode()
            continue
        password = getpass.getpass("Password: ")

        if controller.session.registering:
            controller.submit_registration(username, password)
        else:
            controller.submit_login(username, password)

        if controller.session.error:
            print(f"Error: {controller.session.error}")
        if controller.session.notice:
            print(controller.session.notice)
    return True


def print_messages(messages) -> None:
    for message in messages:
        speaker = "You" if message.sender.value == "user" else "Bot"
        print(f"[{message.timestamp}] {speaker}: {message.text}")


def run(controller) -> None:
    """Run the interactive chat loop."""
    print("=" * 60)
    print("E-commerce Sales Chatbot")
    print("Type '/logout' to log out, 'quit' or 'exit' to leave.")
    print("=" * 60)

    while True:
        if not authenticate(controller):
            break

        print()
        print_messages(controller.session.messages)
        if controller.session.error:
            print(f"Error: {controller.session.error}")

        while controller.session.authenticated:
            try:
                user_input = input("\nYou: ")
            except EOFError:
                controller.logout()
                return

            command = user_input.strip().lower()
            if command in QUIT_COMMANDS:
                controller.logout()
                return
            if command == "/logout":
                controller.logout()
                print("Logged out.")
                break

            reply = controller.send_message(user_input)
            if reply is not None:
                print(f"Bot: {reply}")

    print("\nThank you for using the E-commerce Sales Chatbot!\n")


def main(argv=None) -> int:
    load_env()

    parser = argparse.ArgumentParser(description="E-commerce Sales Chatbot")
    parser.add_argument(
        "--api-url",
        type=str,
        default=None,
        help="Backend API root (default: SHOPCHAT_API_URL or http://localhost:5000/api)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level"
    )
    args = parser.parse_args(argv)

    setup_logger(log_level=args.log_level)

    from shopchat.api_client import ApiClient
    from shopchat.controller import ChatController

    controller = ChatController(api=ApiClient(base_url=args.api_url))
    try:
        run(controller)
    except KeyboardInterrupt:
        print("\n\nGoodbye!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
