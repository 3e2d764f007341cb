class NotFoundError(Exception):
    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with ID {entity_id} does not exist")


class SubmissionConflict(Exception):
    """An in-progress attempt already exists for this quiz and user."""

    def __init__(self, submission_id: int):
        self.submission_id = submission_id
        super().__init__("You already have an in-progress submission for this quiz")


class SubmissionClosed(Exception):
    def __init__(self, submission_id: int):
        self.submission_id = submission_id
        super().__init__(f"Submission {submission_id} has already been submitted")


class InvalidAnswer(Exception):
    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)
