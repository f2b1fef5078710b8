from flask import Blueprint, jsonify

from blockgame.services.grid import GridError, get_grid

main = Blueprint('main', __name__)


@main.route('/')
def index():
    grid = get_grid()
    return jsonify({
        'message': 'Welcome to the block game server!',
        'observers': grid.hub.subscriber_count,
    })


@main.app_errorhandler(GridError)
def handle_grid_error(exc):
    return jsonify(exc.to_dict()), exc.status_code
