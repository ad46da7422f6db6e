"""Board Relay - ``python -m board_relay`` entrypoint."""

from board_relay.server.app import run


def main() -> None:
    run()


if __name__ == "__main__":
    main()
