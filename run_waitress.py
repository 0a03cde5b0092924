"""
Run the Contract Scanner API with the Waitress WSGI server.
Each request runs on a worker thread; the AI client holds no shared state.
"""
import os

from waitress import serve
from main import app

if __name__ == '__main__':
    port = int(os.getenv('PORT', 5000))
    threads = int(os.getenv('WAITRESS_THREADS', 4))

    print("\n" + "="*70)
    print("Starting Contract Scanner with Waitress WSGI Server")
    print(f"Listening on 0.0.0.0:{port} with {threads} threads")
    print("="*70 + "\n")

    serve(app, host='0.0.0.0', port=port, threads=threads)
