"""Tests for univariate polynomial module."""

import numpy as np
import pytest

from polyoptics.polynomial import Monomial, UnivariatePolynomial


class TestMonomial:
    """Tests for single monomial terms."""

    def test_evaluate(self):
        """Monomial should evaluate coefficient * x**exponent."""
        m = Monomial(2.0, 3)
        assert m(2.0) == pytest.approx(16.0)

    def test_negative_exponent_raises(self):
        """Negative exponents are not monomials."""
        with pytest.raises(ValueError):
            Monomial(1.0, -1)

    def test_str(self):
        assert str(Monomial(1.5, 0)) == "1.5"
        assert str(Monomial(1.5, 1)) == "1.5*x"
        assert str(Monomial(1.5, 2)) == "1.5*x^2"


class TestUnivariatePolynomial:
    """Tests for polynomials built from monomials."""

    def test_scalar_evaluation(self):
        """Scalar input should give a float."""
        p = UnivariatePolynomial([Monomial(1.0, 0), Monomial(2.0, 2)])
        value = p(3.0)
        assert isinstance(value, float)
        assert value == pytest.approx(19.0)

    def test_array_evaluation(self):
        """Array input should give same-shaped output."""
        p = UnivariatePolynomial([Monomial(-1.0, 1), Monomial(0.5, 3)])
        x = np.linspace(-1, 1, 11)
        np.testing.assert_allclose(p(x), -x + 0.5 * x**3, rtol=1e-12, atol=1e-15)

    def test_degree_and_length(self):
        p = UnivariatePolynomial([Monomial(1.0, 0), Monomial(0.0, 1), Monomial(3.0, 4)])
        assert p.degree == 4
        assert len(p) == 3

    def test_repeated_exponents_are_summed(self):
        """Terms with equal exponents should add up."""
        p = UnivariatePolynomial([Monomial(1.0, 2), Monomial(2.0, 2)])
        np.testing.assert_allclose(p.coefficients, [0.0, 0.0, 3.0])

    def test_from_coefficients(self):
        p = UnivariatePolynomial.from_coefficients([1.0, 0.0, -2.0])
        assert p(2.0) == pytest.approx(-7.0)
        assert [t.exponent for t in p] == [0, 1, 2]

    def test_coefficients_read_only(self):
        p = UnivariatePolynomial.from_coefficients([1.0, 2.0])
        with pytest.raises(ValueError):
            p.coefficients[0] = 5.0

    def test_lookup_table_endpoints_and_size(self):
        """Lookup table should sample evenly with both endpoints included."""
        p = UnivariatePolynomial.from_coefficients([0.0, 1.0])
        table = p.lookup_table(-1.0, 1.0, 5)
        np.testing.assert_allclose(table, [-1.0, -0.5, 0.0, 0.5, 1.0])

    def test_lookup_table_custom_interval(self):
        p = UnivariatePolynomial.from_coefficients([0.0, 0.0, 1.0])
        table = p.lookup_table(0.0, 2.0, 3)
        np.testing.assert_allclose(table, [0.0, 1.0, 4.0])

    def test_lookup_table_rejects_zero_samples(self):
        p = UnivariatePolynomial.from_coefficients([1.0])
        with pytest.raises(ValueError):
            p.lookup_table(samples=0)

    def test_str_lists_terms(self):
        p = UnivariatePolynomial([Monomial(1.0, 0), Monomial(2.0, 1)])
        assert str(p) == "1.0 + 2.0*x"
