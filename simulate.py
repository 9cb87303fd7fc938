"""
Simple simulation script: plays full Wizard games against a running server.
"""

import random
import sys
import time

import requests


def random_tricks(player_ids, cards):
    """Split `cards` tricks randomly between the players."""
    tricks = {player_id: 0 for player_id in player_ids}
    for _ in range(cards):
        tricks[random.choice(player_ids)] += 1
    return tricks


def main():
    BASE_URL = "http://localhost:8000/api/v1"
    NUM_PLAYERS = 6
    NUM_GAMES = 3

    print("=== Wizard Simulation ===\n")

    # Create players
    print(f"\nCreating {NUM_PLAYERS} players...")
    players = []
    for i in range(NUM_PLAYERS):
        response = requests.post(
            f"{BASE_URL}/players",
            json={"name": f"player_{i}_{int(time.time())}"}
        )
        if response.status_code == 200:
            player_id = response.json()["id"]
            players.append(player_id)
            print(f"  Created player {i + 1} (ID: {player_id})")

    if len(players) < 3:
        print("X Need at least 3 players")
        sys.exit(1)

    # Play games
    print(f"\nPlaying {NUM_GAMES} games...")
    for game_num in range(NUM_GAMES):
        table = random.sample(players, random.randint(3, min(6, len(players))))

        response = requests.post(f"{BASE_URL}/games", json={"player_ids": table})
        if response.status_code != 200:
            print(f"Failed to create game: {response.text}")
            continue

        game = response.json()
        game_id = game["id"]
        print(f"  Game {game_id}: {len(table)} players, {game['total_rounds']} rounds")

        seating = {player_id: seat for seat, player_id in enumerate(random.sample(table, len(table)), 1)}
        response = requests.put(f"{BASE_URL}/games/{game_id}/seats", json={"seats": seating})
        if response.status_code != 200:
            print(f"Failed to arrange seats: {response.text}")
            continue

        for round_number in range(1, game["total_rounds"] + 1):
            response = requests.post(
                f"{BASE_URL}/rounds",
                json={"game_id": game_id, "round_number": round_number, "cards_per_player": round_number}
            )
            if response.status_code != 200:
                print(f"Failed to create round {round_number}: {response.text}")
                break
            round_id = response.json()["id"]

            bids = {player_id: random.randint(0, round_number) for player_id in table}
            trump = random.choice([None, "Hearts", "Diamonds", "Clubs", "Spades"])
            requests.post(
                f"{BASE_URL}/rounds/{round_id}/bids",
                json={"bids": bids, "trump_suit": trump}
            )

            response = requests.post(
                f"{BASE_URL}/rounds/{round_id}/complete",
                json={"bids": bids, "tricks_taken": random_tricks(table, round_number)}
            )
            if response.status_code != 200:
                print(f"Failed to complete round {round_number}: {response.text}")
                break

        summary = requests.get(f"{BASE_URL}/games/{game_id}/summary").json()
        for entry in summary["players"]:
            print(
                f"     {entry['position']}. {entry['name']}: {entry['total_score']} points "
                f"({entry['accuracy_rate']}% bids correct)"
            )

    # Get API leaderboard
    print("\nAPI Leaderboard (Top 3):")
    response = requests.get(f"{BASE_URL}/leaderboard?sort_by=wins&limit=3")
    if response.status_code == 200:
        leaderboard = response.json()
        for entry in leaderboard:
            print(f"  {entry['rank']}. {entry['name']}: {entry['wins']} wins, "
                  f"average {entry['average_score']}")

    print("\n Simulation complete!")


if __name__ == "__main__":
    main()
