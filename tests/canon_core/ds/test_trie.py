"""
tests/canon_core/ds/test_trie.py
Tests del Trie Discriminante.
Verifica: Estabilidad de nodos, Discriminación de claves, Datos lazy,
Ramas débiles y Poda.
"""
import gc
import unittest
import weakref

from canon_core.ds.trie import Trie, primitive_key


class Key:
    pass


class TestTrieLookup(unittest.TestCase):

    def setUp(self):
        self.trie = Trie(weakness=True)

    def test_same_sequence_same_node(self):
        node = self.trie.lookup("a", 1, None)
        self.assertIs(self.trie.lookup("a", 1, None), node)
        self.assertIs(self.trie.lookup_array(["a", 1, None]), node)
        self.assertIs(self.trie.lookup_array(iter(("a", 1, None))), node)

    def test_empty_sequence_is_root(self):
        self.assertIs(self.trie.lookup(), self.trie)
        self.assertIs(self.trie.lookup_array([]), self.trie)

    def test_prefixes_are_distinct(self):
        self.assertIsNot(self.trie.lookup("a"), self.trie.lookup("a", "b"))
        self.assertIs(self.trie.lookup("a", "b"), self.trie.lookup("a").lookup("b"))

    def test_primitive_types_discriminated(self):
        """1, 1.0, True y "1" no deben colapsar."""
        nodes = [self.trie.lookup(k) for k in (1, 1.0, True, "1", b"1")]
        self.assertEqual(len({id(n) for n in nodes}), 5)

    def test_nan_keys_share_node(self):
        self.assertIs(self.trie.lookup(float("nan")), self.trie.lookup(float("nan")))

    def test_objects_by_identity(self):
        a, b = [1], [1]
        self.assertIs(self.trie.lookup(a), self.trie.lookup(a))
        self.assertIsNot(self.trie.lookup(a), self.trie.lookup(b))

    def test_peek_never_creates(self):
        self.trie.lookup("a", "b")
        size = self.trie.size()
        self.assertIsNone(self.trie.peek("a", "c"))
        self.assertIsNone(self.trie.peek_array(["z"]))
        self.assertEqual(self.trie.size(), size)
        self.assertIs(self.trie.peek("a", "b"), self.trie.lookup("a", "b"))

    def test_size(self):
        self.assertEqual(self.trie.size(), 1)
        self.trie.lookup("a", "b")
        self.trie.lookup("a", "c")
        self.assertEqual(self.trie.size(), 4)

    def test_primitive_key(self):
        self.assertEqual(primitive_key(1), (int, 1))
        self.assertNotEqual(primitive_key(1), primitive_key(True))
        self.assertEqual(primitive_key(float("nan")), primitive_key(float("nan")))

    def test_complex_nan_components_kept_apart(self):
        """complex(nan, 1) y complex(1, nan) son valores distintos."""
        nan = float("nan")
        self.assertNotEqual(primitive_key(complex(nan, 1)), primitive_key(complex(1, nan)))
        self.assertEqual(primitive_key(complex(nan, 1)), primitive_key(complex(nan, 1)))
        self.assertIsNot(self.trie.lookup(complex(nan, 1)), self.trie.lookup(complex(1, nan)))
        self.assertIs(self.trie.lookup(complex(1, nan)), self.trie.lookup(complex(1, nan)))


class TestTrieData(unittest.TestCase):

    def test_data_is_lazy(self):
        trie = Trie()
        node = trie.lookup("x")
        self.assertFalse(node.has_data)
        node.data["v"] = 1
        self.assertTrue(node.has_data)
        self.assertIs(trie.lookup("x").data, node.data)
        self.assertEqual(node.data, {"v": 1})

    def test_custom_make_data(self):
        calls = []

        def make():
            calls.append(1)
            return []

        trie = Trie(make_data=make)
        node = trie.lookup(1, 2)
        self.assertEqual(calls, [])
        node.data.append("x")
        node.data.append("y")
        self.assertEqual(calls, [1])
        self.assertEqual(node.data, ["x", "y"])

    def test_remove_prunes_empty_branches(self):
        trie = Trie()
        trie.lookup("a", "b").data["v"] = 1
        trie.lookup("a", "c")

        removed = trie.remove("a", "b")
        self.assertEqual(removed, {"v": 1})
        self.assertIsNone(trie.peek("a", "b"))
        # "a" sigue vivo porque aún tiene a "c"
        self.assertEqual(trie.size(), 3)

        self.assertIsNone(trie.remove_array(["a", "c"]))
        self.assertEqual(trie.size(), 1)

    def test_remove_keeps_nodes_with_children(self):
        trie = Trie()
        trie.lookup("a").data["v"] = 1
        trie.lookup("a", "b").data["w"] = 2
        self.assertEqual(trie.remove("a"), {"v": 1})
        self.assertFalse(trie.lookup("a").has_data)
        self.assertEqual(trie.lookup("a", "b").data, {"w": 2})

    def test_remove_missing(self):
        self.assertIsNone(Trie().remove("nope"))


class TestTrieWeakness(unittest.TestCase):

    def test_weak_branch_dropped_with_key(self):
        trie = Trie(weakness=True)
        key = Key()
        trie.lookup(key, "x")
        self.assertEqual(trie.size(), 3)

        del key
        gc.collect()
        self.assertEqual(trie.size(), 1)

    def test_strong_trie_pins_keys(self):
        trie = Trie(weakness=False)
        key = Key()
        ref = weakref.ref(key)
        trie.lookup(key)
        del key
        gc.collect()
        self.assertIsNotNone(ref())
        self.assertEqual(trie.size(), 2)
        self.assertIsNotNone(trie.peek(ref()))

    def test_non_weakrefable_key(self):
        """object() no admite weakref: se guarda de forma normal."""
        trie = Trie(weakness=True)
        key = object()
        node = trie.lookup(key)
        self.assertIs(trie.peek(key), node)

    def test_primitive_keys_never_weak(self):
        trie = Trie(weakness=True)
        trie.lookup("persistent")
        gc.collect()
        self.assertIsNotNone(trie.peek("persistent"))

    def test_children_inherit_configuration(self):
        trie = Trie(weakness=False, make_data=list)
        child = trie.lookup("a", Key())
        self.assertFalse(child.weakness)
        self.assertEqual(child.data, [])


if __name__ == '__main__':
    unittest.main()
