from flask import Blueprint, current_app, jsonify


users = Blueprint('users', __name__)


@users.route('/register', methods=['POST'])
def register_user():
    user = current_app.extensions['blockgame.users'].register()
    current_app.logger.info(f"[register] id={user['id']} color={user['color']}")
    return jsonify(user)
