import unittest

from hamcrest import equal_to, is_, assert_that, is_not, calling, raises

from lspconnector.support.mixins import CommonEqualityMixin, StringerMixin


class Pair(CommonEqualityMixin, StringerMixin):
    def __init__(self, a=None, b=None):
        self.a = a
        self.b = b


class Other(CommonEqualityMixin):
    def __init__(self, a=None, b=None):
        self.a = a
        self.b = b


class StringerMixinTest(unittest.TestCase):
    def test_stringer(self):
        sut = Pair("123")
        assert_that(str(sut), is_("Pair:{'a': '123', 'b': None}"))


class CommonEqualityMixinTest(unittest.TestCase):

    def test_value_equivalence(self):
        e1 = Pair("123", 123)
        e2 = Pair("12" + "3", 123)
        assert_that(e1, is_(equal_to(e2)))
        assert_that(e1 != e2, is_(False))
        assert_that(hash(e1), is_(hash(e2)))

    def test_value_difference(self):
        assert_that(Pair(1, 2), is_not(equal_to(Pair(1, 3))))

    def test_different_types_not_equal(self):
        assert_that(Pair(1, 2), is_not(equal_to(Other(1, 2))))
        assert_that(Pair(1, 2), is_not(equal_to((1, 2))))

    def test_recursive_values(self):
        e1, e2 = Pair(), Pair()
        e1.a = e2
        e2.a = e1
        assert_that(calling(e1.__eq__).with_args(e2), raises(ValueError))
