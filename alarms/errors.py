class AlarmError(Exception):
    pass


class AlarmIndexError(AlarmError, IndexError):
    def __init__(self, index: int, size: int):
        super().__init__(f"Invalid alarm # {index}")
        self.index = index
        self.size = size


class AlarmInputError(AlarmError, ValueError):
    pass


class AlarmStorageError(AlarmError):
    pass
