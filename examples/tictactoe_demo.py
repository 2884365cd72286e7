#!/usr/bin/env python3
"""
Tic-Tac-Toe as a Petri Net

Demonstrates:
1. Declaring a net procedurally with transition/place/role constructors
2. Firing moves against a caller-owned state vector
3. Roles attached to transitions, and rejected moves reported via Result
4. Driving the game through a Stream with handlers
5. Mermaid export of the current position
"""

import logging

from metamodel import Event, Position, Stream, new_model


def tictactoe(transition, place, role):
    """Nine cells, two turn places, one move transition per player per cell"""
    dx, dy = 220, 140
    board = [
        [place(f"{i}{j}", 1, 1, Position((j + 1) * dx, (i + 1) * dy)) for j in range(3)]
        for i in range(3)
    ]
    players = {
        "X": {"turn": place("X", 1, 1, Position(40, 200)), "role": role("X"), "next": "O"},
        "O": {"turn": place("O", 0, 1, Position(830, 370)), "role": role("O"), "next": "X"},
    }
    for i, row in enumerate(board):
        for j, cell in enumerate(row):
            for marking, player in players.items():
                move = transition(f"{marking}{i}{j}", player["role"])
                player["turn"].connect(1, move)
                cell.connect(1, move)
                move.connect(1, players[player["next"]]["turn"])


# ============================================================================
# Demo 1: Direct firing
# ============================================================================


def demo_direct_firing():
    print("=" * 60)
    print("Demo 1: Direct firing")
    print("=" * 60)

    m = new_model(schema="octoe", declaration=tictactoe)
    state = m.initial_vector()
    print(m)
    print(f"Opening moves: {m.enabled_actions(state)}")

    for action in ("X11", "O00", "X11", "O02"):
        res = m.fire(state, action)
        verdict = "ok" if res.ok else "rejected"
        flags = []
        if res.inhibited:
            flags.append("inhibited")
        if res.underflow:
            flags.append("underflow")
        if res.overflow:
            flags.append("overflow")
        print(f"  {action:4} role={res.role} {verdict} {' '.join(flags)}")

    print(f"State: {state}")


# ============================================================================
# Demo 2: Stream with handlers
# ============================================================================


def demo_stream():
    print("\n" + "=" * 60)
    print("Demo 2: Stream with handlers")
    print("=" * 60)

    m = new_model(schema="octoe", declaration=tictactoe)
    stream = Stream([m])

    for marking in ("X", "O"):
        for i in range(3):
            for j in range(3):
                stream.dispatcher.on(
                    f"{marking}{i}{j}",
                    lambda s, evt: print(f"  #{s.seq - 1} {evt.role} took {evt.action[1:]}"),
                )
    stream.dispatcher.on_fail(lambda s, evt: print(f"  illegal move {evt.action}"))

    for action in ("X00", "O11", "X01", "X02", "O22", "X02"):
        stream.dispatch(Event(schema="octoe", action=action))

    print(f"History: {[log.event.action for log in stream.history]}")
    stream.restart()
    print(f"After restart: seq={stream.seq} history={stream.history}")


# ============================================================================
# Demo 3: Mermaid
# ============================================================================


def demo_mermaid():
    print("\n" + "=" * 60)
    print("Demo 3: Mermaid diagram after X takes the center")
    print("=" * 60)

    m = new_model(schema="octoe", declaration=tictactoe)
    state = m.initial_vector()
    m.fire(state, "X11")
    print(m.to_mermaid(state))


def main():
    demo_direct_firing()
    demo_stream()
    demo_mermaid()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
