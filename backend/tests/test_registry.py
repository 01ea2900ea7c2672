from buzzquiz.services.game.registry import PlayerRegistry


def test_add_and_lookup_by_sid():
    reg = PlayerRegistry()
    reg.add('p1', 'Ann', 'sid-1')
    assert 'p1' in reg
    assert reg.find_by_sid('sid-1')[0] == 'p1'
    assert reg.find_by_sid('nope') is None
    assert reg.find_by_sid(None) is None


def test_disconnect_keeps_score_and_identity():
    reg = PlayerRegistry()
    player = reg.add('p1', 'Ann', 'sid-1')
    player.score = 750
    pid, gone = reg.mark_disconnected('sid-1')
    assert pid == 'p1'
    assert gone.connected is False
    assert gone.sid is None
    assert reg.snapshot() == []

    back = reg.reconnect('p1', 'Annie', 'sid-2')
    assert back.score == 750
    assert back.connected is True
    assert back.name == 'Annie'
    assert reg.snapshot() == [{'name': 'Annie', 'score': 750}]


def test_snapshot_sorted_desc_and_stable_on_ties():
    reg = PlayerRegistry()
    reg.add('a', 'Ann', 's1').score = 100
    reg.add('b', 'Bob', 's2').score = 300
    reg.add('c', 'Cat', 's3').score = 100
    reg.add('d', 'Dan', 's4').score = 300
    assert [p['name'] for p in reg.snapshot()] == ['Bob', 'Dan', 'Ann', 'Cat']


def test_snapshot_is_recomputed():
    reg = PlayerRegistry()
    p = reg.add('a', 'Ann', 's1')
    first = reg.snapshot()
    p.score = 10
    assert first == [{'name': 'Ann', 'score': 0}]
    assert reg.snapshot() == [{'name': 'Ann', 'score': 10}]


def test_reset_scores_and_connected_ids():
    reg = PlayerRegistry()
    reg.add('a', 'Ann', 's1').score = 5
    reg.add('b', 'Bob', 's2').score = 7
    reg.mark_disconnected('s2')
    reg.reset_scores()
    assert reg.get('a').score == 0
    assert reg.get('b').score == 0
    assert reg.connected_ids() == ['a']
