class SessionError(Exception):
    """Base class for recoverable session errors."""


class TicketNotFound(SessionError):
    def __init__(self, ticket_id):
        super().__init__(f'Ticket {ticket_id} not found')
        self.ticket_id = ticket_id


class InvalidInput(SessionError):
    pass


class NotRunning(SessionError):
    pass


class PoolExhausted(SessionError):
    pass


class TicketIdsExhausted(SessionError):
    pass
