import pytest

from coreext.callable import CallInto, CallMut, CallRef, into_call, mut_call, ref_call


class WhatRef(CallRef):
    def __init__(self, value):
        self.value = value

    def ref_call(self, params):
        return self.value == params


class WhatMut(CallMut):
    def __init__(self):
        self.state = 0

    def mut_call(self, params):
        self.state += 1
        return self.state


class WhatInto(CallInto):
    def __init__(self, value):
        self.value = value

    def into_call(self, params):
        return params(self.value)


class ZeroParam(CallRef):
    def ref_call(self, params):
        return 3


class SingleParam(CallRef):
    def ref_call(self, params):
        return int(params)


class AddTwo(CallRef):
    def ref_call(self, params):
        left, right = params
        return left + right


class AddThree(CallRef):
    def ref_call(self, params):
        f0, f1, f2 = params
        return f0 + f1 + f2


class ImplicitReturn(CallRef):
    def ref_call(self, params):
        params.append(27)


class ExplicitReturn(CallRef):
    def ref_call(self, params):
        return 27


class DerivesCallRef(CallRef):
    def ref_call(self, params):
        return 27


class DerivesCallMut(CallRef):
    def ref_call(self, params):
        return 81

    def mut_call(self, params):
        return self.ref_call(params)


class DerivesCallInto(CallRef):
    def ref_call(self, params):
        return 243

    def mut_call(self, params):
        return self.ref_call(params)

    def into_call(self, params):
        return self.ref_call(params)


class PushTwice(CallRef):
    def ref_call(self, params):
        vector, value = params
        vector.append(value)
        vector.append(value)


class ComputeFib(CallMut):
    def __init__(self):
        self.nums = (0, 1)

    def mut_call(self, params):
        left, right = self.nums
        self.nums = (right, left + right)
        params.append(right)


class IntoElem(CallInto):
    def __init__(self, items):
        self.items = items

    def into_call(self, params):
        return next(iter(self.items[params:]), None)


class MulBy(CallRef):
    def __init__(self, factor):
        self.factor = factor

    def ref_call(self, params):
        return params * self.factor


class Reporter(CallMut):
    def __init__(self):
        self.line = 0

    def mut_call(self, params):
        buffer, person, score = params
        buffer.append(f"{self.line}- {person}: {score}\n")
        self.line += 1


class Duplicator(CallInto):
    def __init__(self, items):
        self.items = items

    def into_call(self, params):
        return [elem for elem in self.items for _ in range(2)]


def test_ref_call():
    env = WhatRef("hello")
    assert ref_call(env, "hello") is True
    assert env.ref_call("hello") is True
    assert ref_call(env, "lo") is False


def test_mut_call():
    env = WhatMut()
    assert mut_call(env, ()) == 1
    assert mut_call(env, ()) == 2
    assert env.mut_call(()) == 3


def test_into_call():
    assert into_call(WhatInto("what"), str) == "what"
    assert into_call(WhatInto(1), float) == 1.0


def test_parameter_counts():
    assert ref_call(ZeroParam(), ()) == 3
    assert ref_call(SingleParam(), 5) == 5
    assert ref_call(AddTwo(), (5, 3)) == 8
    assert ref_call(AddThree(), (5, 8, 21)) == 34


def test_return_optionality():
    num = []
    assert ref_call(ImplicitReturn(), num) is None
    assert num == [27]
    assert ref_call(ExplicitReturn(), ()) == 27


def test_which_impls():
    for cls, expected in ((DerivesCallRef, 27), (DerivesCallMut, 81), (DerivesCallInto, 243)):
        assert ref_call(cls(), ()) == expected
        assert mut_call(cls(), ()) == expected
        assert into_call(cls(), ()) == expected


def test_closures():
    def ref_fn():
        return 10

    counter = [0]

    def mut_fn():
        counter[0] += 1
        return counter[0]

    items = [0, 1, 2]

    def into_fn():
        return items

    assert ref_call(ref_fn, ()) == 10
    assert mut_call(ref_fn, ()) == 10
    assert into_call(ref_fn, ()) == 10

    assert mut_call(mut_fn, ()) == 1
    assert mut_call(mut_fn, ()) == 2
    assert mut_call(mut_fn, ()) == 3
    assert into_call(mut_fn, ()) == 4

    assert into_call(into_fn, ()) == [0, 1, 2]


def test_closures_take_tuples():
    assert ref_call(lambda a: a + 10, (5,)) == 15
    assert ref_call(lambda a, b: a + b, (8, 13)) == 21
    orig = [3, 5, 8, 13, 21, 34]
    assert into_call(lambda s, i: orig[s:][i], (3, 1)) == 21


def test_push_twice():
    vector = []
    ref_call(PushTwice(), (vector, 3))
    assert vector == [3, 3]
    ref_call(PushTwice(), (vector, 5))
    ref_call(PushTwice(), (vector, 8))
    assert vector == [3, 3, 5, 5, 8, 8]


def test_compute_fib():
    fibs = ComputeFib()
    numbers = []
    for _ in range(6):
        mut_call(fibs, numbers)
    assert numbers == [1, 1, 2, 3, 5, 8]


def test_into_elem():
    values = [3, 5, 8, 13, 21, 34, 55, 89]
    assert into_call(IntoElem(values), 0) == 3
    assert into_call(IntoElem(values), 3) == 13
    assert into_call(IntoElem(values), 7) == 89
    assert into_call(IntoElem(values), 8) is None


def test_mul_by():
    two, seven = MulBy(2), MulBy(7)
    assert ref_call(two, 3) == 6
    assert ref_call(two, 5) == 10
    assert ref_call(seven, 3) == 21
    assert ref_call(seven, 5) == 35


def test_reporter():
    reporter = Reporter()
    buffer = []
    mut_call(reporter, (buffer, "foo", 10))
    mut_call(reporter, (buffer, "bar", 7))
    mut_call(reporter, (buffer, "baz", 1000))
    assert "".join(buffer) == "0- foo: 10\n1- bar: 7\n2- baz: 1000\n"


def test_duplicator():
    assert into_call(Duplicator([3, 5]), ()) == [3, 3, 5, 5]
    assert into_call(Duplicator(["hi", "ho"]), ()) == ["hi", "hi", "ho", "ho"]


def test_weaker_objects_reject_stronger_calls():
    with pytest.raises(TypeError):
        ref_call(WhatMut(), ())
    with pytest.raises(TypeError):
        mut_call(WhatInto(1), int)
    with pytest.raises(TypeError):
        ref_call(WhatInto(1), int)


def test_plain_callable_requires_tuple():
    with pytest.raises(TypeError):
        ref_call(lambda a: a, 5)
    with pytest.raises(TypeError):
        into_call(42, ())


def test_abstract_classes_cannot_be_instantiated():
    with pytest.raises(TypeError):
        CallRef()
    with pytest.raises(TypeError):
        CallMut()
    with pytest.raises(TypeError):
        CallInto()