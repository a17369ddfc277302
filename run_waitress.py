"""
Run Flask app with Waitress WSGI server (production-grade, no reloader issues)
"""
import os
from waitress import serve
from main import app

if __name__ == '__main__':
    host = os.getenv('HOST', '0.0.0.0')
    port = int(os.getenv('PORT', '5000'))
    threads = int(os.getenv('WAITRESS_THREADS', '4'))

    print("\n" + "="*70)
    print("Starting App Store Guidelines Checker with Waitress WSGI Server")
    print(f"Listening on http://{host}:{port} ({threads} threads)")
    print("="*70 + "\n")

    serve(app, host=host, port=port, threads=threads)
