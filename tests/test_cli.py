from worldopoly.cli import main, simulate_game


def test_simulate_game_is_reproducible():
    first = simulate_game(seed=11, max_turns=40, verbose=False)
    second = simulate_game(seed=11, max_turns=40, verbose=False)

    assert first.turn_number == second.turn_number
    assert [p.money for p in first.players] == [p.money for p in second.players]
    assert first.logs == second.logs


def test_simulate_game_stops_at_turn_limit():
    state = simulate_game(seed=3, max_turns=25, verbose=False)

    assert state.game_over or state.turn_number == 25
    owned = {tile_id for p in state.players for tile_id in p.properties}
    assert owned == {t.id for t in state.board if t.owner_id is not None}


def test_main_prints_summary(capsys):
    main(["--seed", "5", "--max-turns", "10", "--quiet", "--ai-models", "gemma2-9b-it"])

    out = capsys.readouterr().out
    assert "Final Standings:" in out
    assert "Gemma 2" in out
