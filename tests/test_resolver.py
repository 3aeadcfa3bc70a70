import random

from letterfall.game.grid import GameGrid
from letterfall.game.resolver import WordResolver, find_candidates, select_words
from letterfall.game.rules import ScoringRules
from letterfall.services.dictionary import WordList

from tests.helpers import make_state, write_word


def test_minimum_word_length_by_level():
    rules = ScoringRules()
    assert rules.min_word_length(1) == 3
    assert rules.min_word_length(9) == 3
    assert rules.min_word_length(10) == 4
    assert rules.min_word_length(20) == 5
    assert rules.min_word_length(55) == 5
    assert not rules.no_repeats_active(19)
    assert rules.no_repeats_active(20)


def test_candidates_are_rows_then_columns():
    grid = GameGrid(10, 33)
    write_word(grid, "CAT", 0, 32)
    write_word(grid, "DOG", 5, 10, vertical=True)
    found = find_candidates(grid, WordList(["cat", "dog"]), 3)
    assert [c.word for c in found] == ["CAT", "DOG"]
    assert found[1].cells == ((5, 10), (5, 11), (5, 12))


def test_runs_stop_at_gaps():
    grid = GameGrid(10, 33)
    grid.set(0, 32, "C")
    grid.set(1, 32, "A")
    grid.set(3, 32, "T")
    assert find_candidates(grid, WordList(["cat"]), 3) == []


def test_longest_word_wins_shared_cells():
    grid = GameGrid(10, 33)
    write_word(grid, "CATS", 0, 32)
    found = find_candidates(grid, WordList(["cat", "cats"]), 3)
    assert [c.word for c in found] == ["CAT", "CATS"]
    assert [c.word for c in select_words(found)] == ["CATS"]


def test_longer_vertical_beats_crossing_horizontal():
    grid = GameGrid(10, 33)
    write_word(grid, "DISC", 0, 29, vertical=True)
    write_word(grid, "AT", 1, 32)
    found = find_candidates(grid, WordList(["cat", "disc"]), 3)
    assert [c.word for c in found] == ["CAT", "DISC"]
    assert [c.word for c in select_words(found)] == ["DISC"]


def test_equal_length_ties_keep_discovery_order():
    grid = GameGrid(10, 33)
    write_word(grid, "CAT", 0, 32)
    write_word(grid, "DO", 2, 30, vertical=True)
    found = find_candidates(grid, WordList(["cat", "dot"]), 3)
    assert [c.word for c in found] == ["CAT", "DOT"]
    assert [c.word for c in select_words(found)] == ["CAT"]


def test_accepted_words_never_share_cells():
    letters = "CATSDOGEAR"
    dictionary = WordList(["cat", "cats", "dog", "ear", "eat", "tea", "sea", "era", "ate", "oat", "rat", "tar", "art"])
    rnd = random.Random(1234)
    for _ in range(25):
        grid = GameGrid(10, 33)
        for y in range(20, 33):
            for x in range(10):
                if rnd.random() < 0.8:
                    grid.set(x, y, rnd.choice(letters))
        accepted = select_words(find_candidates(grid, dictionary, 3))
        claimed = set()
        for word in accepted:
            assert claimed.isdisjoint(word.cells)
            claimed.update(word.cells)


def test_cat_cleared_and_column_above_falls():
    state = make_state()
    grid = state.grid
    for y in range(11, 33):
        for x in (3, 4, 5):
            grid.set(x, y, "Q")
    grid.set(4, 9, "X")
    write_word(grid, "CAT", 3, 10)

    passes = WordResolver(WordList(["cat"])).cascade(state)

    assert len(passes) == 1
    assert state.score == 30
    assert state.removed_words == ["CAT"]
    assert state.found_words == {"cat"}
    assert grid.get(4, 10) == "X"
    assert grid.get(4, 9) is None
    assert grid.get(3, 10) is None
    assert grid.get(5, 10) is None
    assert state.combo.step == 1


def test_gravity_leaves_no_floating_letters():
    dictionary = WordList(["cat", "dog", "tea", "eat", "ate"])
    rnd = random.Random(99)
    for _ in range(10):
        state = make_state()
        for y in range(15, 33):
            for x in range(10):
                if rnd.random() < 0.7:
                    state.grid.set(x, y, rnd.choice("CATDOGE"))
        WordResolver(dictionary).cascade(state)
        for x in range(10):
            seen_letter = False
            for y in range(33):
                if state.grid.get(x, y) is not None:
                    seen_letter = True
                else:
                    assert not seen_letter, f"gap under a letter in column {x}"


def test_cascade_finds_word_formed_by_collapse():
    state = make_state()
    grid = state.grid
    write_word(grid, "GCAT", 2, 29, vertical=True)
    grid.set(0, 32, "D")
    grid.set(1, 32, "O")

    passes = WordResolver(WordList(["cat", "dog"])).cascade(state)

    assert [p.accepted[0].word for p in passes] == ["CAT", "DOG"]
    assert state.removed_words == ["CAT", "DOG"]
    assert state.score == 60
    assert state.combo.step == 2
    assert state.combo.multiplier == 1.5
    assert grid.filled_count() == 0


def test_combo_multiplier_applies_to_later_passes():
    state = make_state()
    state.combo.on_clear()
    state.combo.on_clear()
    write_word(state.grid, "DOG", 0, 32)
    WordResolver(WordList(["dog"])).resolve_pass(state)
    assert state.score == 45


def test_no_repeats_from_level_twenty():
    state = make_state(level=20)
    state.found_words.add("house")
    write_word(state.grid, "HOUSE", 0, 32)
    result = WordResolver(WordList(["house"])).resolve_pass(state)
    assert not result.words_found
    assert state.grid.row_string(32) == "HOUSE....."


def test_repeats_allowed_below_twenty():
    state = make_state(level=1)
    state.found_words.add("cat")
    write_word(state.grid, "CAT", 0, 32)
    result = WordResolver(WordList(["cat"])).resolve_pass(state)
    assert [c.word for c in result.accepted] == ["CAT"]
    assert state.removed_words == ["CAT"]


def test_short_words_ignored_at_higher_levels():
    state = make_state(level=10)
    write_word(state.grid, "CAT", 0, 32)
    result = WordResolver(WordList(["cat"])).resolve_pass(state)
    assert not result.words_found


def test_level_up_every_ten_words():
    state = make_state()
    state.words_found_since_level_up = 9
    state.gravity_interval_ms = 600
    write_word(state.grid, "CAT", 0, 32)
    result = WordResolver(WordList(["cat"])).resolve_pass(state)
    assert result.leveled_up
    assert state.level == 2
    assert state.words_found_since_level_up == 0
    assert state.gravity_interval_ms == 540


def test_gravity_speedup_has_floor():
    rules = ScoringRules()
    assert rules.next_gravity_ms(130) == 120
    assert rules.next_gravity_ms(120) == 120


def test_quiz_requested_on_every_fifth_removed_word():
    state = make_state()
    state.removed_words = ["ONE", "TWO", "SIX", "TEN"]
    write_word(state.grid, "CAT", 0, 32)
    result = WordResolver(WordList(["cat"])).resolve_pass(state)
    assert result.quiz_words == ["CAT"]

    write_word(state.grid, "DOG", 0, 32)
    result = WordResolver(WordList(["dog"])).resolve_pass(state)
    assert result.quiz_words == []


def test_score_uses_level_and_multiplier():
    rules = ScoringRules()
    assert rules.score_for_word("CAT", 1, 1.0) == 30
    assert rules.score_for_word("HOUSE", 3, 1.5) == 225
    assert rules.score_for_word("CAT", 1, 1.25) == 37
