#!/usr/bin/env python3
"""Run script for the Hive Mind game."""
import argparse
import os

from hivemind.app import create_app, get_simulation
from hivemind.game_loop import GameLoop

def main():
    parser = argparse.ArgumentParser(description="Hive Mind game server")
    parser.add_argument('--headless', action='store_true',
                        help="run the simulation loop in the foreground without the HTTP server")
    parser.add_argument('--ticks', type=int, default=None,
                        help="stop the headless loop after this many ticks")
    args = parser.parse_args()

    app = create_app(os.environ.get('FLASK_ENV', 'development'))

    if args.headless:
        with app.app_context():
            simulation = get_simulation()
            loop = GameLoop(simulation)
            try:
                loop.run(max_ticks=args.ticks)
            except KeyboardInterrupt:
                loop.stop()
                simulation.auto_save()
            snapshot = simulation.get_snapshot()
            print(f"Resources: {snapshot['resources']}")
            print(f"Evolution points: {snapshot['evolution']['points']:.2f}")
        return

    port = int(os.environ.get('PORT', 5001))
    print("Starting Hive Mind game server...")
    print(f"API available at http://localhost:{port}/api/game/state")
    app.run(debug=True, host='0.0.0.0', port=port)

if __name__ == '__main__':
    main()
