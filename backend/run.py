import os

from blockgame import create_app, socketio, start_server

app = create_app()

if __name__ == '__main__':
    start_server(app)
    # The web frontend expects the socket server on :8099
    port = int(os.environ.get('PORT', '8099'))
    # No reloader: it would start a second round watcher in the child process
    socketio.run(app, port=port, debug=os.environ.get('FLASK_DEBUG') == '1',
                 use_reloader=False, allow_unsafe_werkzeug=True)
