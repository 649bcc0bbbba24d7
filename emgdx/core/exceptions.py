class ReferenceDataError(ValueError):
    """Reference tables are malformed (duplicate ids, unparsable conditions)."""


class PatternNotFoundError(LookupError):
    def __init__(self, pattern_id: str):
        super().__init__(f"Diagnostic pattern '{pattern_id}' not found")
        self.pattern_id = pattern_id


class UnknownNerveError(LookupError):
    def __init__(self, nerve_id: str):
        super().__init__(f"No reference values for nerve '{nerve_id}'")
        self.nerve_id = nerve_id
