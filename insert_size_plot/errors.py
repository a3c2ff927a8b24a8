# errors raised while building an insert size plot
# only opening the input and writing the chart are fatal, a single bad record is skipped


class InsertSizeError(Exception):
    pass


class SourceOpenError(InsertSizeError):
    def __init__(self, path, reason):
        super().__init__(f'could not open alignment file {path}: {reason}')
        self.path = path
        self.reason = reason


class RecordParseError(InsertSizeError):
    pass


class StreamReadError(InsertSizeError):
    pass


class RenderError(InsertSizeError):
    def __init__(self, path, reason):
        super().__init__(f'could not write plot {path}: {reason}')
        self.path = path
        self.reason = reason
