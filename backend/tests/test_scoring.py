from buzzquiz.models import Player
from buzzquiz.services.game.scoring import (
    apply_penalty, buzz_points, clamp_rounds, last_place,
)


def test_buzz_points_at_known_times():
    assert buzz_points(0) == 1000
    assert buzz_points(15000) == 550
    assert buzz_points(30000) == 100
    assert buzz_points(120000) == 100


def test_buzz_points_monotonic_and_bounded():
    previous = buzz_points(0)
    for ms in range(0, 40000, 250):
        value = buzz_points(ms)
        assert 100 <= value <= 1000
        assert value <= previous
        previous = value


def test_negative_elapsed_is_treated_as_zero():
    assert buzz_points(-500) == 1000


def test_penalty_is_500_and_clamped_at_zero():
    p = Player(name='Ann', score=1200)
    assert apply_penalty(p) == 500
    assert p.score == 700
    p.score = 300
    assert apply_penalty(p) == 300
    assert p.score == 0
    assert apply_penalty(p) == 0
    assert p.score == 0


def test_clamp_rounds():
    assert clamp_rounds(5, 10) == 5
    assert clamp_rounds(0, 10) == 1
    assert clamp_rounds(-3, 10) == 1
    assert clamp_rounds(99, 10) == 30
    assert clamp_rounds('12', 10) == 12
    assert clamp_rounds(None, 10) == 10
    assert clamp_rounds('lots', 10) == 10
    assert clamp_rounds(True, 10) == 10
    assert clamp_rounds(float('inf'), 10) == 30
    assert clamp_rounds(float('-inf'), 10) == 1
    assert clamp_rounds(1e400, 10) == 30
    assert clamp_rounds(float('nan'), 10) == 10


def test_last_place_needs_two_players():
    assert last_place([]) is None
    assert last_place([{'name': 'Ann', 'score': 5}]) is None
    assert last_place([{'name': 'Ann', 'score': 5}, {'name': 'Bob', 'score': 0}]) == 'Bob'
