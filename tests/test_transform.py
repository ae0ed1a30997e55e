import math

import numpy as np

from particle_chain.rendering import transform as tf


class TestTransform:
    def test_identity_leaves_points(self):
        pts = [(1.0, 2.0), (-3.0, 4.5)]
        np.testing.assert_allclose(tf.apply(tf.identity(), pts), pts)

    def test_translation(self):
        out = tf.apply(tf.translation(10.0, -5.0), [(1.0, 1.0)])
        np.testing.assert_allclose(out, [[11.0, -4.0]])

    def test_rotation_quarter_turn(self):
        out = tf.apply(tf.rotation(math.pi / 2.0), [(1.0, 0.0)])
        np.testing.assert_allclose(out, [[0.0, 1.0]], atol=1e-12)

    def test_scaling(self):
        out = tf.apply(tf.scaling(2.0, 0.5), [(3.0, 4.0)])
        np.testing.assert_allclose(out, [[6.0, 2.0]])

    def test_flip_y(self):
        out = tf.apply(tf.flip_y(100.0), [(10.0, 0.0), (10.0, 100.0)])
        np.testing.assert_allclose(out, [[10.0, 100.0], [10.0, 0.0]])

    def test_composition_applies_in_local_frame(self):
        # translate, then rotate: the rotation happens around the new origin.
        m = tf.translation(10.0, 0.0) @ tf.rotation(math.pi / 2.0)
        out = tf.apply(m, [(1.0, 0.0)])
        np.testing.assert_allclose(out, [[10.0, 1.0]], atol=1e-12)

    def test_apply_shape(self):
        out = tf.apply(tf.identity(), [(0.0, 0.0), (1.0, 1.0), (2.0, 2.0)])
        assert out.shape == (3, 2)
