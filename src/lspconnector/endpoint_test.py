import unittest

from hamcrest import assert_that, is_, equal_to, calling, raises, is_not

from lspconnector.categories import EndpointConfig
from lspconnector.endpoint import EndpointResolver, ResolvedEndpoint, parse_port

categories = {
    'x': EndpointConfig('x', 'h0', 5000),
    'rust': EndpointConfig('rust', 'language-server', 5555),
}


class ResolvedEndpointTest(unittest.TestCase):
    def test_value_equality(self):
        assert_that(ResolvedEndpoint('h', 1), is_(equal_to(ResolvedEndpoint('h', 1))))
        assert_that(ResolvedEndpoint('h', 1), is_not(equal_to(ResolvedEndpoint('h', 2))))

    def test_key(self):
        assert_that(ResolvedEndpoint('h', 1).key(), is_('h:1'))


class ParsePortTest(unittest.TestCase):
    def test_valid(self):
        assert_that(parse_port('1'), is_(1))
        assert_that(parse_port('65535'), is_(65535))

    def test_invalid(self):
        for value in ('', 'notanumber', '0', '-1', '65536', '12.5', None, '1_000', '+80', '\u0661\u0662', 80):
            assert_that(parse_port(value), is_(None), value)


class EndpointResolverTest(unittest.TestCase):

    def resolve(self, category='x', **environ):
        return EndpointResolver(categories, environ).resolve(category)

    def test_defaults(self):
        assert_that(self.resolve(), is_(equal_to(ResolvedEndpoint('h0', 5000))))

    def test_generic_variables(self):
        assert_that(self.resolve(HOST='g', PORT='7'), is_(equal_to(ResolvedEndpoint('g', 7))))

    def test_category_port_over_generic(self):
        assert_that(self.resolve(HOST='g', PORT='7', X_PORT='9'), is_(equal_to(ResolvedEndpoint('g', 9))))

    def test_category_host_over_generic(self):
        assert_that(self.resolve(HOST='g', X_HOST='specific'), is_(equal_to(ResolvedEndpoint('specific', 5000))))

    def test_port_only_override(self):
        assert_that(self.resolve(X_PORT='6000'), is_(equal_to(ResolvedEndpoint('h0', 6000))))

    def test_other_category_variables_ignored(self):
        assert_that(self.resolve(RUST_HOST='r', RUST_PORT='1'), is_(equal_to(ResolvedEndpoint('h0', 5000))))

    def test_malformed_port_falls_back_to_default(self):
        assert_that(self.resolve(X_PORT='notanumber'), is_(equal_to(ResolvedEndpoint('h0', 5000))))

    def test_non_decimal_port_falls_back_to_default(self):
        assert_that(self.resolve(X_PORT='1_0_0_0'), is_(equal_to(ResolvedEndpoint('h0', 5000))))
        assert_that(self.resolve(PORT='+80'), is_(equal_to(ResolvedEndpoint('h0', 5000))))

    def test_malformed_generic_port_falls_back_to_default(self):
        assert_that(self.resolve(PORT='99999'), is_(equal_to(ResolvedEndpoint('h0', 5000))))

    def test_empty_variables_are_unset(self):
        assert_that(self.resolve(X_HOST='', X_PORT=' ', HOST='g', PORT='7'),
                    is_(equal_to(ResolvedEndpoint('g', 7))))

    def test_whitespace_trimmed(self):
        assert_that(self.resolve(X_HOST=' spaced ', X_PORT=' 8 '), is_(equal_to(ResolvedEndpoint('spaced', 8))))

    def test_reads_environment_each_time(self):
        environ = {}
        sut = EndpointResolver(categories, environ)
        assert_that(sut.resolve('x').port, is_(5000))
        environ['X_PORT'] = '9'
        assert_that(sut.resolve('x').port, is_(9))

    def test_custom_variable_names(self):
        custom = {'x': EndpointConfig('x', 'h0', 5000, host_var='XLS_ADDR', port_var='XLS_TCP')}
        sut = EndpointResolver(custom, {'XLS_ADDR': 'a', 'XLS_TCP': '3', 'X_PORT': '4'})
        assert_that(sut.resolve('x'), is_(equal_to(ResolvedEndpoint('a', 3))))

    def test_unknown_category(self):
        assert_that(calling(self.resolve).with_args('cobol'), raises(KeyError))

    def test_process_environment_by_default(self):
        sut = EndpointResolver(categories)
        assert_that(sut.environ, is_not(None))
