from flask import Blueprint, current_app, jsonify

from blockgame.services.grid import get_grid


blocks = Blueprint('blocks', __name__)


@blocks.route('', methods=['GET'])
def get_all_blocks():
    grid = get_grid()
    return jsonify([block.to_dict() for block in grid.store.get_all()])


@blocks.route('/<int:block_id>', methods=['GET'])
def get_block(block_id):
    grid = get_grid()
    return jsonify(grid.store.get_by_id(block_id).to_dict())


@blocks.route('/reset', methods=['POST'])
def reset_board():
    grid = get_grid()
    _, observed_generation = grid.timer.round_view()
    # A concurrent reset that already started a new round makes this one a no-op
    applied = grid.timer.reset(current_app.config.get('ROUND_DURATION_MS', 30000),
                               expected_generation=observed_generation)
    if not applied:
        current_app.logger.info(f"[reset-http] superseded by concurrent reset, observed_generation={observed_generation}")
    return '', 204


@blocks.route('/round-time', methods=['GET'])
def get_round_end_time():
    grid = get_grid()
    return jsonify(grid.timer.get_end_time())
