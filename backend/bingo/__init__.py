from flask import Flask, jsonify
from flask_cors import CORS
from flask_socketio import SocketIO
import click
import random
from config import Config

socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS', [])
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from bingo.broadcast import BroadcastHub
    from bingo.services.game import GameSession
    from bingo.socketio_events import register_socketio_handlers, socketio_sender

    # The single live session for this process
    hub = BroadcastHub(socketio_sender, logger=flask_app.logger)
    flask_app.extensions['bingo_session'] = GameSession(
        hub=hub,
        number_max=flask_app.config['NUMBER_MAX'],
        ticket_size=flask_app.config['TICKET_SIZE'],
        logger=flask_app.logger,
    )

    # Import and register blueprints here
    from bingo.main import main
    flask_app.register_blueprint(main)

    from bingo.api.session import session_api
    flask_app.register_blueprint(session_api, url_prefix='/session')

    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    from bingo.services.game.errors import InvalidInput, TicketIdsExhausted, TicketNotFound

    @flask_app.errorhandler(TicketNotFound)
    def handle_not_found(exc):
        return jsonify({'error': str(exc)}), 404

    @flask_app.errorhandler(InvalidInput)
    def handle_invalid_input(exc):
        return jsonify({'error': str(exc)}), 400

    @flask_app.errorhandler(TicketIdsExhausted)
    def handle_ids_exhausted(exc):
        return jsonify({'error': str(exc)}), 409

    @click.command('simulate')
    @click.option('--players', type=click.IntRange(min=1), default=3, show_default=True, help='Number of tickets to issue.')
    @click.option('--seed', type=int, default=None, help='Seed for a reproducible game.')
    def simulate_command(players, seed):
        """Plays a full local game and reports the winner."""
        rng = random.Random(seed) if seed is not None else None
        session = GameSession(
            number_max=flask_app.config['NUMBER_MAX'],
            ticket_size=flask_app.config['TICKET_SIZE'],
            rng=rng,
            logger=flask_app.logger,
        )
        tickets = session.issue_bulk([f'Player {i + 1}' for i in range(players)])
        for ticket in tickets:
            session.mark_ready(ticket.id)
        session.start()

        draws = 0
        finished = []
        while not finished and not session.pool.exhausted:
            result = session.draw_next()
            draws += 1
            finished = [p for p in result['players'] if p['hits'] == p['total']]
        if not finished:
            print(f'No winner after {draws} draws')
            return
        for p in finished:
            session.submit_bingo(p['id'])
        names = ', '.join(f"{p['name']} ({p['id']})" for p in finished)
        print(f'Winner after {draws} draws: {names}')

    flask_app.cli.add_command(simulate_command)

    return flask_app
