#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""Unit testing for Schrödinger time evolution"""

import unittest

import numpy as np
import pytest
from scipy.linalg import expm

import kettle
from kettle import (GenericBasis, SpinBasis, Ket, Bra, Operator, Propagator,
                    IncompatibleBases, evolve_static, evolve_dynamic)

tight = {"rtol": 1e-10, "atol": 1e-12}


def random_hermitian(basis, seed=7):
    rng = np.random.default_rng(seed)
    a = rng.normal(size=(basis.dim, basis.dim)) + 1j * rng.normal(size=(basis.dim, basis.dim))
    return Operator(basis, basis, 0.5 * (a + a.conj().T))


def random_ket(basis, seed=11):
    rng = np.random.default_rng(seed)
    data = rng.normal(size=basis.dim) + 1j * rng.normal(size=basis.dim)
    return Ket(basis, data / np.linalg.norm(data))


class TestTwoLevel(unittest.TestCase):
    """Spin 1/2 driven by a * sigma_x"""
    def setUp(self):
        self.a = 2.0
        self.basis = SpinBasis(0.5)
        self.sx = kettle.sigmax(self.basis)
        self.H = self.a * self.sx
        self.psi0 = kettle.spinup(self.basis)
        self.tspan = np.linspace(0.0, 2.0 * np.pi / self.a, 100)

    def analytic(self, t):
        sxpsi = self.sx * self.psi0
        return np.cos(self.a * t) * self.psi0.data - 1j * np.sin(self.a * t) * sxpsi.data

    def test_analytic_solution(self):
        """Rabi oscillation matches cos(at)|psi0> - i sin(at) sx|psi0>"""
        tout, states = evolve_static(self.tspan, self.psi0, self.H, **tight)
        self.assertEqual(len(tout), len(self.tspan))
        self.assertEqual(len(states), len(self.tspan))
        for t, psi in zip(tout, states):
            self.assertIsInstance(psi, Ket)
            self.assertLess(np.max(np.abs(psi.data - self.analytic(t))), 1e-6)

    def test_output_times(self):
        """Output is delivered exactly at the requested times"""
        tout, _ = evolve_static(self.tspan, self.psi0, self.H)
        self.assertEqual(tout.dtype, np.float64)
        self.assertTrue(np.array_equal(tout, self.tspan))

    def test_integer_times_are_coerced(self):
        """Integer output times are accepted and reported as floats"""
        tout, states = evolve_static([0, 1, 2], self.psi0, self.H, **tight)
        self.assertEqual(tout.dtype, np.float64)
        self.assertTrue(np.allclose(states[2].data, self.analytic(2.0), atol=1e-8))

    def test_initial_state_untouched(self):
        """The caller's initial state is never written"""
        before = self.psi0.data.copy()
        evolve_static(self.tspan, self.psi0, self.H)
        self.assertTrue(np.array_equal(self.psi0.data, before))

    def test_first_output_is_initial_state(self):
        """The first output is a copy of the initial state"""
        _, states = evolve_static(self.tspan, self.psi0, self.H)
        self.assertTrue(np.array_equal(states[0].data, self.psi0.data))
        self.assertIsNot(states[0], self.psi0)

    def test_single_time(self):
        """A single output time returns the initial state without stepping"""
        calls = []
        tout, results = evolve_static([0.5], self.psi0, self.H,
                                      fout=lambda t, psi: calls.append(t) or psi.copy())
        self.assertEqual(calls, [0.5])
        self.assertEqual(list(tout), [0.5])
        self.assertTrue(np.array_equal(results[0].data, self.psi0.data))

    def test_backward_in_time(self):
        """Decreasing output times integrate backwards"""
        tspan = np.linspace(0.0, -1.5, 7)
        tout, states = evolve_static(tspan, self.psi0, self.H, **tight)
        for t, psi in zip(tout, states):
            self.assertLess(np.max(np.abs(psi.data - self.analytic(t))), 1e-6)

    def test_sparse_and_dense_generators_agree(self):
        """Sparse and dense storage of the generator give the same trajectory"""
        _, sparse_states = evolve_static(self.tspan[:10], self.psi0, self.H, **tight)
        _, dense_states = evolve_static(self.tspan[:10], self.psi0, kettle.dense(self.H), **tight)
        for a, b in zip(sparse_states, dense_states):
            self.assertTrue(np.allclose(a.data, b.data, atol=1e-9))

    def test_fout_results_are_returned(self):
        """Return values of the output callback are collected"""
        sz = kettle.sigmaz(self.basis)
        tout, values = evolve_static(self.tspan, self.psi0, self.H,
                                     fout=lambda t, psi: kettle.expect(sz, psi).real, **tight)
        self.assertTrue(np.allclose(values, np.cos(2.0 * self.a * tout), atol=1e-7))


class TestGenericGenerator(unittest.TestCase):
    """Random Hermitian generator on a four dimensional space"""
    def setUp(self):
        self.basis = GenericBasis(4)
        self.H = random_hermitian(self.basis)
        self.psi0 = random_ket(self.basis)
        self.tspan = np.linspace(0.0, 2.0, 21)

    def exact(self, t):
        return expm(-1j * self.H.data * t) @ self.psi0.data

    def test_unitarity(self):
        """The norm of the state is conserved"""
        _, states = evolve_static(self.tspan, self.psi0, self.H, **tight)
        norm0 = kettle.norm(self.psi0)
        for psi in states:
            self.assertAlmostEqual(kettle.norm(psi), norm0, places=8)

    def test_matches_matrix_exponential(self):
        """Evolution agrees with exp(-iHt)|psi0>"""
        tout, states = evolve_static(self.tspan, self.psi0, self.H, **tight)
        for t, psi in zip(tout, states):
            self.assertTrue(np.allclose(psi.data, self.exact(t), atol=1e-7))

    def test_bra_is_dual_of_ket(self):
        """Evolving <psi0| gives the conjugate of evolving |psi0>"""
        bra0 = kettle.dagger(self.psi0)
        self.assertIsInstance(bra0, Bra)
        _, kets = evolve_static(self.tspan, self.psi0, self.H, **tight)
        _, bras = evolve_static(self.tspan, bra0, self.H, **tight)
        for ket, bra in zip(kets, bras):
            self.assertIsInstance(bra, Bra)
            self.assertTrue(np.allclose(bra.data, np.conj(ket.data), atol=1e-8))

    def test_propagator_consistency(self):
        """U(t)|psi0> from the evolved identity matches the evolved ket"""
        _, kets = evolve_static(self.tspan, self.psi0, self.H, **tight)
        _, propagators = evolve_static(self.tspan, kettle.identityoperator(self.basis), self.H, **tight)
        for ket, U in zip(kets, propagators):
            self.assertIsInstance(U, Propagator)
            self.assertTrue(np.allclose((U * self.psi0).data, ket.data, atol=1e-8))

    def test_propagator_is_unitary(self):
        """The evolved identity stays unitary"""
        _, propagators = evolve_static(self.tspan, kettle.identityoperator(self.basis), self.H, **tight)
        for U in propagators:
            self.assertTrue(np.allclose(U.data.conj().T @ U.data, np.eye(4), atol=1e-8))

    def test_static_dynamic_equivalence(self):
        """A constant generator function reproduces the static trajectory"""
        _, static = evolve_static(self.tspan, self.psi0, self.H, **tight)
        _, dynamic = evolve_dynamic(self.tspan, self.psi0, lambda t, psi: self.H, **tight)
        for a, b in zip(static, dynamic):
            self.assertTrue(np.allclose(a.data, b.data, atol=1e-12))

    def test_dynamic_bra_and_propagator(self):
        """Dynamic evolution handles bras and propagators with the right conventions"""
        bra0 = kettle.dagger(self.psi0)
        _, bras = evolve_dynamic(self.tspan, bra0, lambda t, psi: self.H, **tight)
        _, props = evolve_dynamic(self.tspan, kettle.identityoperator(self.basis),
                                  lambda t, psi: self.H, **tight)
        for t, bra, U in zip(self.tspan, bras, props):
            self.assertTrue(np.allclose(bra.data, np.conj(self.exact(t)), atol=1e-7))
            self.assertTrue(np.allclose(U.data, expm(-1j * self.H.data * t), atol=1e-7))


class TestDynamicGenerators(unittest.TestCase):
    """Explicitly time and state dependent generators"""
    def setUp(self):
        self.basis = SpinBasis(0.5)
        self.sx = kettle.sigmax(self.basis)
        self.sz = kettle.sigmaz(self.basis)

    def test_time_dependent_generator(self):
        """H(t) = t sx rotates by the accumulated angle t^2/2"""
        psi0 = kettle.spinup(self.basis)
        tspan = np.linspace(0.0, 3.0, 31)
        tout, states = evolve_dynamic(tspan, psi0, lambda t, psi: t * self.sx, **tight)
        sxpsi = (self.sx * psi0).data
        for t, psi in zip(tout, states):
            phase = 0.5 * t * t
            ref = np.cos(phase) * psi0.data - 1j * np.sin(phase) * sxpsi
            self.assertTrue(np.allclose(psi.data, ref, atol=1e-7))

    def test_state_dependent_generator(self):
        """Mean-field generator <sz> sz sees the current state"""
        theta = 0.3
        psi0 = Ket(self.basis, [np.cos(theta), np.sin(theta)])
        z0 = np.cos(2.0 * theta)
        seen = []

        def f(t, psi):
            self.assertIsInstance(psi, kettle.StateView)
            z = kettle.expect(self.sz, psi).real
            seen.append(z)
            return z * self.sz

        tspan = np.linspace(0.0, 4.0, 9)
        tout, states = evolve_dynamic(tspan, psi0, f, **tight)
        self.assertGreater(len(seen), 0)
        for t, psi in zip(tout, states):
            ref = np.array([np.exp(-1j * z0 * t) * np.cos(theta),
                            np.exp(1j * z0 * t) * np.sin(theta)])
            self.assertTrue(np.allclose(psi.data, ref, atol=1e-7))

    def test_generator_receives_time(self):
        """The generator function is called with times inside the integration interval"""
        times = []

        def f(t, psi):
            times.append(t)
            return self.sx

        evolve_dynamic([0.0, 1.0], kettle.spinup(self.basis), f)
        self.assertGreater(len(times), 1)
        self.assertTrue(all(0.0 <= t <= 1.0 for t in times))


class TestIncompatibleBases(unittest.TestCase):
    """Generators that do not fit the state are rejected"""
    def setUp(self):
        self.spin = SpinBasis(0.5)
        self.generic = GenericBasis(2)
        self.psi0 = kettle.spinup(self.spin)
        self.tspan = np.linspace(0.0, 1.0, 5)

    def test_eager_rejection_other_space(self):
        """Same dimension but different space raises before any output"""
        calls = []
        H = Operator(self.generic, self.generic, np.eye(2))
        with self.assertRaises(IncompatibleBases):
            evolve_static(self.tspan, self.psi0, H, fout=lambda t, psi: calls.append(t))
        self.assertEqual(calls, [])

    def test_eager_rejection_distinct_generic_bases(self):
        """Two separately built generic bases are different spaces"""
        calls = []
        psi0 = Ket(GenericBasis(2), [1.0, 0.0])
        H = Operator(GenericBasis(2), GenericBasis(2), np.eye(2))
        with self.assertRaises(IncompatibleBases):
            evolve_static(self.tspan, psi0, H, fout=lambda t, psi: calls.append(t))
        self.assertEqual(calls, [])

    def test_eager_rejection_non_square(self):
        """A generator mapping the state into another space is rejected"""
        calls = []
        H = Operator(self.generic, self.spin, np.eye(2))
        with self.assertRaises(IncompatibleBases):
            evolve_static(self.tspan, self.psi0, H, fout=lambda t, psi: calls.append(t))
        self.assertEqual(calls, [])

    def test_eager_rejection_bra(self):
        """Bras are checked against the left basis of the generator"""
        H = Operator(self.spin, self.generic, np.eye(2))
        bra0 = kettle.dagger(Ket(self.generic, [1.0, 0.0]))
        with self.assertRaises(IncompatibleBases):
            evolve_static(self.tspan, bra0, H)

    def test_dynamic_rejection_mid_run(self):
        """An incompatible generator aborts the run; earlier outputs stand"""
        good = kettle.sigmax(self.spin)
        bad = Operator(self.generic, self.generic, np.eye(2))
        delivered = []

        def f(t, psi):
            return good if t < 1.0 else bad

        tspan = np.linspace(0.0, 2.0, 21)
        with self.assertRaises(IncompatibleBases):
            evolve_dynamic(tspan, self.psi0, f,
                           fout=lambda t, psi: delivered.append((t, psi.copy())),
                           max_step=0.05)
        self.assertGreater(len(delivered), 1)
        self.assertTrue(all(t < 1.0 for t, _ in delivered))
        self.assertTrue(np.array_equal(delivered[0][1].data, self.psi0.data))

    def test_dynamic_rejection_first_evaluation(self):
        """A generator that never fits fails at the first evaluation"""
        bad = Operator(self.generic, self.generic, np.eye(2))
        delivered = []
        with self.assertRaises(IncompatibleBases):
            evolve_dynamic(self.tspan, self.psi0, lambda t, psi: bad,
                           fout=lambda t, psi: delivered.append(t))
        self.assertEqual(delivered, [0.0])


def test_alias_safety():
    """Copies taken inside the output callback are not changed by later outputs"""
    basis = SpinBasis(0.5)
    H = 1.3 * kettle.sigmax(basis)
    psi0 = kettle.spinup(basis)
    tspan = np.linspace(0.0, 2.0, 11)

    copies = []
    snapshots = []

    def fout(t, psi):
        copy = psi.copy()
        copies.append(copy)
        snapshots.append(copy.data.copy())
        return None

    evolve_static(tspan, psi0, H, fout=fout)
    assert len(copies) == len(tspan)
    for copy, snapshot in zip(copies, snapshots):
        assert np.array_equal(copy.data, snapshot)
    assert not np.allclose(copies[0].data, copies[5].data)


def test_view_is_borrowed():
    """The object handed to the callback is a read-only view, not the state"""
    basis = SpinBasis(0.5)

    def fout(t, psi):
        assert isinstance(psi, kettle.StateView)
        assert not psi.data.flags.writeable
        assert psi.kind is Ket
        return None

    evolve_static([0.0, 1.0], kettle.spinup(basis), kettle.sigmaz(basis), fout=fout)


def test_writing_to_view_fails():
    """Writing into the borrowed buffer raises"""
    basis = SpinBasis(0.5)

    def fout(t, psi):
        psi.data[0] = 0.0

    with pytest.raises(ValueError):
        evolve_static([0.0, 1.0], kettle.spinup(basis), kettle.sigmaz(basis), fout=fout)


def test_view_cannot_start_evolution():
    basis = SpinBasis(0.5)
    view = kettle.StateView(kettle.spinup(basis))
    with pytest.raises(TypeError):
        evolve_static([0.0, 1.0], view, kettle.sigmaz(basis))


def test_non_square_propagator_rejected():
    basis = SpinBasis(0.5)
    U0 = Operator(basis, GenericBasis(2), np.eye(2))
    with pytest.raises(ValueError):
        evolve_static([0.0, 1.0], U0, kettle.sigmaz(basis))


def test_dynamic_generator_must_be_callable():
    basis = SpinBasis(0.5)
    with pytest.raises(TypeError):
        evolve_dynamic([0.0, 1.0], kettle.spinup(basis), kettle.sigmaz(basis))


def test_aliases():
    assert kettle.schroedinger is evolve_static
    assert kettle.schroedinger_dynamic is evolve_dynamic


if __name__ == '__main__':
    unittest.main()
