class ImportFailure(Exception):
    """Base error for a batch profile import. Carries a user-facing message and an optional low-level detail."""

    default_message = 'Failed to create profiles'

    def __init__(self, message=None, detail=None):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)

    def as_response_data(self):
        data = {'error': self.message}
        if self.detail:
            data['details'] = self.detail
        return data


class InvalidPayload(ImportFailure):
    default_message = 'Invalid payload'


class DanglingGuardianReference(InvalidPayload):
    default_message = 'Student references a guardian that is not part of this batch'


class PersistenceFailure(ImportFailure):
    default_message = 'Failed to create profiles'
