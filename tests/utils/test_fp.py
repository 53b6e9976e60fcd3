from nestsafe.utils.fp import compose, unique_stable

def test_compose_right_to_left():
    f = compose(lambda x: x + 1, lambda x: x * 2)  # (x*2)+1
    assert f(3) == 7

def test_unique_stable_keeps_first_seen_order():
    assert unique_stable([3, 1, 3, 2, 1]) == [3, 1, 2]
    assert unique_stable(["A", "a", "b"], key=str.lower) == ["A", "b"]
