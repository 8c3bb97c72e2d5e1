import hashlib
import hmac
from unittest import TestCase

from ..errors import ProtocolError
from ..signature import normalize_algorithm, parse_signature, sign
from ..signature import topic_key, verify


class TopicKeyTests(TestCase):

    def test_known_value(self):
        expected = hmac.new(b'secret', b'http://example.com/feed',
                            hashlib.sha1).hexdigest()
        self.assertEqual(topic_key('secret', 'http://example.com/feed'),
                         expected)

    def test_stable(self):
        self.assertEqual(topic_key('secret', 'http://a/'),
                         topic_key('secret', 'http://a/'))

    def test_depends_on_topic_and_secret(self):
        key = topic_key('secret', 'http://a/')
        self.assertNotEqual(key, topic_key('secret', 'http://b/'))
        self.assertNotEqual(key, topic_key('other', 'http://a/'))


class AlgorithmTests(TestCase):

    def test_wire_spellings(self):
        self.assertEqual(normalize_algorithm('sha1'), 'sha1')
        self.assertEqual(normalize_algorithm('sha256'), 'sha256')
        self.assertEqual(normalize_algorithm('sha384'), 'sha384')
        self.assertEqual(normalize_algorithm('sha512'), 'sha512')

    def test_canonical_spellings(self):
        self.assertEqual(normalize_algorithm('SHA-1'), 'sha1')
        self.assertEqual(normalize_algorithm('SHA-256'), 'sha256')
        self.assertEqual(normalize_algorithm('SHA-384'), 'sha384')
        self.assertEqual(normalize_algorithm('SHA-512'), 'sha512')
        self.assertEqual(normalize_algorithm('Sha256'), 'sha256')

    def test_unknown(self):
        for name in ('md5', 'sha224', '', None):
            with self.assertRaises(ProtocolError) as cm:
                normalize_algorithm(name)
            self.assertEqual(cm.exception.status, 403)


class ParseSignatureTests(TestCase):

    def test_parse(self):
        self.assertEqual(parse_signature('sha256=abcdef'),
                         ('sha256', 'abcdef'))

    def test_malformed(self):
        for header in ('sha256', 'sha256=', '=abcdef', ''):
            with self.assertRaises(ProtocolError) as cm:
                parse_signature(header)
            self.assertEqual(cm.exception.status, 403)


class VerifyTests(TestCase):

    def setUp(self):
        self.key = topic_key('secret', 'http://publisher.example.com/topic')
        self.body = b'<feed>hello</feed>'

    def test_valid(self):
        for algorithm in ('sha1', 'sha256', 'sha384', 'sha512'):
            header = '%s=%s' % (algorithm, sign(self.key, self.body,
                                                algorithm))
            self.assertTrue(verify(self.key, self.body, header))

    def test_digest_case_insensitive(self):
        header = 'SHA-256=%s' % sign(self.key, self.body, 'sha256').upper()
        self.assertTrue(verify(self.key, self.body, header))

    def test_changed_body(self):
        header = 'sha256=%s' % sign(self.key, self.body, 'sha256')
        self.assertFalse(verify(self.key, b'<feed>hellO</feed>', header))

    def test_changed_key(self):
        header = 'sha256=%s' % sign(self.key, self.body, 'sha256')
        other = topic_key('secret', 'http://publisher.example.com/other')
        self.assertFalse(verify(other, self.body, header))

    def test_changed_algorithm(self):
        header = 'sha1=%s' % sign(self.key, self.body, 'sha256')
        self.assertFalse(verify(self.key, self.body, header))

    def test_non_hex_digest(self):
        self.assertFalse(verify(self.key, self.body, u'sha1=\xe9t\xe9'))
