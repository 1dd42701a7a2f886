import os

from live_auction import create_app, socketio

app = create_app()

if __name__ == '__main__':
    # Lot timers run as background tasks of the Socket.IO server
    socketio.run(
        app,
        host=os.environ.get('HOST', '127.0.0.1'),
        port=int(os.environ.get('PORT', '5000')),
        debug=True,
    )
