"""Command strings of the ASCII control/data protocol."""

from gocator.util.defaults import TERMINATOR

# control channel
START = "Start"
STOP = "Stop"
TRIGGER = "Trigger"

# data channel
RESULT = "Result"
GET_XY_DATA = "GET_XY_DATA"
DATA_COMMANDS = (RESULT, GET_XY_DATA)


def terminate(command: str, terminator: str = TERMINATOR) -> str:
    """Append the line terminator unless the command already ends with it."""
    if command.endswith(terminator):
        return command
    return command + terminator
