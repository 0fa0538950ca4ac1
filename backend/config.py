import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list of origins allowed for HTTP and Socket.IO
    CORS_ORIGINS = [
        o.strip() for o in (os.environ.get('CORS_ORIGINS') or
                            'http://localhost:5173,http://127.0.0.1:5173').split(',')
        if o.strip()
    ]
    # Numbers are drawn from 1..NUMBER_MAX; each ticket holds TICKET_SIZE of them
    NUMBER_MAX = int(os.environ.get('NUMBER_MAX', '75'))
    TICKET_SIZE = int(os.environ.get('TICKET_SIZE', '15'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
