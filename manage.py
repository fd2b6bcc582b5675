"""
This is the main file to run the game.
It imports the run function from the lane_shooter app and runs it.
"""

from lane_shooter.app import run

if __name__ == "__main__":
    run()
