"""Errors raised by commands; all of them end up as one line of output."""


class TermTaskError(Exception):
    default = "Something went wrong."

    def __init__(self, message: str = ""):
        super().__init__(message or self.default)

    @property
    def message(self) -> str:
        return self.args[0]


# ────────────────────────────────────────────────────────────────────────────
# Dispatch
# ────────────────────────────────────────────────────────────────────────────
class CommandNotFound(TermTaskError):
    default = "Command not found."


class ActionNotFound(TermTaskError):
    default = "Unknown action."


# ────────────────────────────────────────────────────────────────────────────
# Records
# ────────────────────────────────────────────────────────────────────────────
class EmptyContent(TermTaskError):
    default = "No content provided."


class InvalidIndex(TermTaskError):
    default = "Please provide a valid number."


class IndexOutOfRange(InvalidIndex):
    pass


class NotFound(TermTaskError):
    default = "Nothing matched."


class InvalidDateFormat(TermTaskError):
    default = "Invalid date format. Use YYMMDD."


class MalformedImportFile(TermTaskError):
    default = "Could not parse file. Make sure it's a valid JSON array file."


# ────────────────────────────────────────────────────────────────────────────
# Timers
# ────────────────────────────────────────────────────────────────────────────
class InvalidTimeFormat(TermTaskError):
    default = "Invalid time format. Use HH:MM."


class EmptyMessage(TermTaskError):
    default = "Please provide a reminder message."


class AlreadyRunning(TermTaskError):
    default = "A timer is already running."


class NotRunning(TermTaskError):
    default = "No timer is running."


class InvalidDuration(TermTaskError):
    default = "Please provide a valid number of minutes."


# ────────────────────────────────────────────────────────────────────────────
# Calculator
# ────────────────────────────────────────────────────────────────────────────
class CalculatorError(TermTaskError):
    pass


class EmptyExpression(CalculatorError):
    default = "No expression provided."


class InvalidCharacters(CalculatorError):
    default = "Invalid characters in expression."


class InvalidExpression(CalculatorError):
    default = "Invalid mathematical expression."
