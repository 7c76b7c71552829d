"""Command-line call simulator - plays the telephony provider against the server API."""

import logging
import sys
import uuid
import xml.etree.ElementTree as ET

import httpx

from restaurant_voice.config import get_config, setup_logging

logger = logging.getLogger(__name__)


def summarize_twiml(twiml: str) -> tuple[str, str]:
    """Extract the spoken text and the follow-up action from a TwiML answer.

    Args:
        twiml: TwiML document returned by ``/voice``

    Returns:
        Tuple of (spoken text, action) where action is one of
        "listen", "hangup", "transfer <number>" or "none"
    """
    root = ET.fromstring(twiml)
    spoken = " ".join((say.text or "").strip() for say in root.iter("Say"))

    if root.find("Record") is not None:
        action = "listen"
    elif root.find("Dial") is not None:
        action = f"transfer {(root.find('Dial').text or '').strip()}"
    elif root.find("Hangup") is not None:
        action = "hangup"
    else:
        action = "none"

    return spoken, action


class CallSimulatorCLI:
    """Interactive phone call against a running server - HTTP client."""

    def __init__(self) -> None:
        """Initialize the CLI."""
        self.config = get_config()
        setup_logging(self.config)

        # One simulated Twilio call SID for the whole session
        self.call_sid = f"CA{uuid.uuid4().hex}"
        logger.info(f"Simulated call SID: {self.call_sid}")

        self._display_config_status()

    def _display_config_status(self) -> None:
        """Display configuration status to the user."""
        print("\n" + "=" * 60)
        print("RESTAURANT VOICE AGENT - Call Simulator")
        print("\n" + "=" * 60)
        print(f"server: {self.config.server_url}")
        print(f"restaurant: {self.config.restaurant_name}")
        print("\n" + "=" * 60 + "\n")

    def run(self) -> None:
        """Run the simulated call until the agent ends or transfers it."""
        print("Examples:")
        print('  "Ich möchte morgen um 19 Uhr einen Tisch für 4 Personen, Name Anna"')
        print('  "Zwei Pizza Margherita zum Abholen um 18 Uhr bitte"')
        print('  "Wann haben Sie geöffnet?"\n')
        print("Type 'quit' or 'exit' to hang up.\n")

        action = self._send_turn("")

        while action == "listen":
            try:
                user_input = input("\nCaller: ").strip()

                if user_input.lower() in ["quit", "exit", "q"]:
                    print("\nCaller hung up. Goodbye!")
                    return

                action = self._send_turn(user_input)

            except KeyboardInterrupt:
                print("\n\nCaller hung up. Goodbye!")
                return
            except Exception as e:
                logger.error(f"Unexpected error: {e}", exc_info=True)
                print(f"\n⚠ An unexpected error occurred: {e}")
                return

        print(f"\nCall ended ({action}).")

    def _send_turn(self, speech: str) -> str:
        """Send one call turn to the server.

        Args:
            speech: Caller utterance (empty for the first turn)

        Returns:
            The agent's follow-up action, or "error"
        """
        form = {"CallSid": self.call_sid, "From": "+4930000000"}
        if speech:
            form["SpeechResult"] = speech

        try:
            with httpx.Client(timeout=60.0) as client:
                response = client.post(f"{self.config.server_url}/voice", data=form)

            if response.status_code != 200:
                print(f"\n⚠ Server error (status {response.status_code}): {response.text}")
                return "error"

            spoken, action = summarize_twiml(response.text)
            print(f"\nAgent: {spoken}")
            print(f"[{action}]")

        except httpx.TimeoutException:
            logger.exception("Request timed out")
            print("\n⚠ Request timed out. Please check the server logs.")
            return "error"
        except httpx.ConnectError:
            logger.exception("Cannot connect to server")
            print(f"\n⚠ Cannot connect to server at {self.config.server_url}")
            print("Make sure the server is running:")
            print("  python -m restaurant_voice.server")
            return "error"
        except ET.ParseError:
            logger.exception("Server returned invalid TwiML")
            print(f"\n⚠ Server returned invalid TwiML:\n{response.text}")
            return "error"
        else:
            return action


def main() -> None:
    """Main entry point for the CLI."""
    try:
        # Validate configuration by attempting to load it
        get_config()
    except Exception as e:
        print(f"Configuration error: {e}")
        print("\nPlease check the environment variables or the .env file.")
        sys.exit(1)

    cli = CallSimulatorCLI()
    cli.run()


if __name__ == "__main__":
    main()
