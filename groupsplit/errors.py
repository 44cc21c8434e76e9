"""
errors.py - exceptions raised by the split normalizer and the group ledger

All of them are input-validation failures (ValueError subclasses), never
system faults. Each carries a stable `code` so callers can map it to their
own transport (e.g. an HTTP 400 body) without parsing messages.
"""


class SplitError(ValueError):
    code = "SPLIT_ERROR"


class InvalidSplitInput(SplitError):
    """Empty participant list or a non-positive / non-numeric amount."""
    code = "INVALID_SPLIT_INPUT"


class NegativeSplitAmount(SplitError):
    code = "NEGATIVE_SPLIT_AMOUNT"

    def __init__(self, participant_id, value):
        self.participant_id = participant_id
        self.value = value
        super().__init__(f"Split amount for participant {participant_id} cannot be negative, got {value}")


class SplitMismatch(SplitError):
    """Custom amounts don't add up to the expense total."""
    code = "SPLIT_MISMATCH"

    def __init__(self, actual, expected):
        self.actual = actual
        self.expected = expected
        super().__init__(f"Custom split total ({actual}) must equal expense amount ({expected})")


class InvalidPercentage(SplitError):
    code = "INVALID_PERCENTAGE"

    def __init__(self, participant_id, value):
        self.participant_id = participant_id
        self.value = value
        super().__init__(f"Percentage must be between 0 and 100, got {value} for participant {participant_id}")


class PercentageMismatch(SplitError):
    code = "PERCENTAGE_MISMATCH"

    def __init__(self, actual):
        self.actual = actual
        super().__init__(f"Percentage split must total 100, got {actual}")


class UnsupportedSplitMode(SplitError):
    code = "UNSUPPORTED_SPLIT_MODE"

    def __init__(self, mode):
        self.mode = mode
        super().__init__(f"Unsupported split mode: {mode}")


class GroupError(ValueError):
    code = "GROUP_ERROR"


class ParticipantLimitExceeded(GroupError):
    code = "PARTICIPANT_LIMIT_EXCEEDED"

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"A group can have at most {limit} participants (including owner)")


class UnknownParticipant(GroupError):
    code = "UNKNOWN_PARTICIPANT"

    def __init__(self, participant_id):
        self.participant_id = participant_id
        super().__init__(f"Participant {participant_id} is not a member of this group")
