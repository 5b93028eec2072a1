"""
Tests for the z3 translation of the expression model.
"""

import pytest
import z3

from chc_interface.errors import DuplicateDeclaration, InvalidSort, TranslationError, UnknownRelation
from chc_interface.smt import BOOL, INT, ArraySort, Expression, FunctionSort, Z3Translator


@pytest.fixture
def translator():
    return Z3Translator(z3.Context())


def _valid(translator, formula):
    """True when ``formula`` holds for every assignment."""
    solver = z3.Solver(ctx=translator.context)
    solver.add(z3.Not(formula))
    return solver.check() == z3.unsat


class TestDeclarations:

    def test_declare_constant_and_function(self, translator):
        translator.declare_variable("x", INT)
        translator.declare_variable("inv", FunctionSort((INT,), BOOL))

        assert list(translator.constants) == ["x"]
        assert list(translator.functions) == ["inv"]
        assert translator.constants["x"].sort() == z3.IntSort(translator.context)
        assert translator.functions["inv"].arity() == 1

    def test_declare_without_sort_fails_and_records_nothing(self, translator):
        with pytest.raises(InvalidSort):
            translator.declare_variable("x", None)
        assert translator.constants == {}
        assert translator.current_free_variables() == []

    def test_declare_with_non_sort_fails_and_records_nothing(self, translator):
        with pytest.raises(InvalidSort):
            translator.declare_variable("x", "Int")
        with pytest.raises(InvalidSort):
            translator.declare_variable("inv", FunctionSort(("Int",), BOOL))
        assert translator.constants == {}
        assert translator.functions == {}

    def test_identical_redeclaration_is_noop(self, translator):
        translator.declare_variable("x", INT)
        translator.declare_variable("x", INT)
        assert len(translator.current_free_variables()) == 1

    def test_conflicting_redeclaration_fails(self, translator):
        translator.declare_variable("x", INT)
        with pytest.raises(DuplicateDeclaration) as exc:
            translator.declare_variable("x", BOOL)
        assert exc.value.name == "x"
        assert translator.constants["x"].sort() == z3.IntSort(translator.context)

    def test_function_sort_with_function_domain_is_rejected(self, translator):
        bad = FunctionSort((FunctionSort((INT,), INT),), BOOL)
        with pytest.raises(InvalidSort):
            translator.declare_variable("f", bad)
        assert "f" not in translator.functions

    def test_free_variables_in_declaration_order(self, translator):
        for name in ["c", "a", "b"]:
            translator.declare_variable(name, INT)
        translator.declare_variable("r", FunctionSort((INT,), BOOL))
        assert [str(v) for v in translator.current_free_variables()] == ["c", "a", "b"]

    def test_lookup_relation_symbol(self, translator):
        translator.declare_variable("inv", FunctionSort((INT,), BOOL))
        assert translator.lookup_relation_symbol("inv").name() == "inv"
        with pytest.raises(UnknownRelation):
            translator.lookup_relation_symbol("missing")

    def test_array_sort(self, translator):
        translator.declare_variable("a", ArraySort(INT, BOOL))
        sort = translator.constants["a"].sort()
        assert z3.is_array_sort(translator.constants["a"])
        assert sort.domain() == z3.IntSort(translator.context)
        assert sort.range() == z3.BoolSort(translator.context)


class TestTranslate:

    def test_literals(self, translator):
        assert z3.is_true(translator.translate(Expression.literal(True)))
        assert z3.is_false(translator.translate(Expression.literal(False)))
        assert translator.translate(Expression.literal(-4)).as_long() == -4

    def test_arithmetic_and_comparisons(self, translator):
        translator.declare_variable("x", INT)
        x = Expression("x", sort=INT)
        formula = translator.translate(
            Expression.implies(x > 2, ((x - 1) * 2 >= 4) & (x / 1 == x) & (-x < 0))
        )
        assert _valid(translator, formula)

    def test_ite(self, translator):
        translator.declare_variable("x", INT)
        x = Expression("x", sort=INT)
        abs_x = Expression.ite(x < 0, -x, x)
        assert _valid(translator, translator.translate(abs_x >= 0))

    def test_select_store(self, translator):
        translator.declare_variable("a", ArraySort(INT, INT))
        translator.declare_variable("i", INT)
        a = Expression("a", sort=ArraySort(INT, INT))
        i = Expression("i", sort=INT)
        formula = Expression.select(Expression.store(a, i, 7), i) == 7
        assert _valid(translator, translator.translate(formula))

    def test_function_application(self, translator):
        translator.declare_variable("x", INT)
        inv = Expression("inv", sort=FunctionSort((INT,), BOOL))
        translator.declare_variable("inv", inv.sort)
        app = translator.translate(inv(Expression("x", sort=INT) + 1))
        assert z3.is_app(app)
        assert app.decl().name() == "inv"
        assert str(app.arg(0)) == "x + 1"

    def test_nullary_relation(self, translator):
        translator.declare_variable("err", FunctionSort((), BOOL))
        app = translator.translate(Expression("err", (), BOOL))
        assert app.decl().name() == "err"
        assert app.num_args() == 0

    def test_translation_uses_given_context(self, translator):
        translator.declare_variable("x", INT)
        term = translator.translate(Expression("x", sort=INT) + 1)
        assert term.ctx == translator.context

    def test_undeclared_symbol_fails(self, translator):
        with pytest.raises(TranslationError):
            translator.translate(Expression("y", sort=INT) > 0)

    def test_unknown_operator_fails(self, translator):
        translator.declare_variable("x", INT)
        x = Expression("x", sort=INT)
        with pytest.raises(TranslationError):
            translator.translate(Expression("mod", (x, x), INT))

    def test_wrong_arity_fails(self, translator):
        translator.declare_variable("x", INT)
        x = Expression("x", sort=INT)
        with pytest.raises(TranslationError):
            translator.translate(Expression("not", (x, x), BOOL))
        inv = Expression("inv", sort=FunctionSort((INT,), BOOL))
        translator.declare_variable("inv", inv.sort)
        with pytest.raises(TranslationError):
            translator.translate(inv(x, x))

    def test_sort_mismatch_fails(self, translator):
        translator.declare_variable("x", INT)
        translator.declare_variable("a", ArraySort(INT, INT))
        x = Expression("x", sort=INT)
        a = Expression("a", sort=ArraySort(INT, INT))
        with pytest.raises(TranslationError):
            translator.translate(~x)
        with pytest.raises(TranslationError):
            translator.translate(x + a)

    def test_constant_applied_to_arguments_fails(self, translator):
        translator.declare_variable("x", INT)
        with pytest.raises(TranslationError):
            translator.translate(Expression("x", (Expression.literal(1),), INT))

    def test_formula_must_be_boolean(self, translator):
        translator.declare_variable("x", INT)
        x = Expression("x", sort=INT)
        assert z3.is_bool(translator.translate_formula(x > 0))
        with pytest.raises(TranslationError):
            translator.translate_formula(x + 1)
        with pytest.raises(TranslationError):
            translator.translate_formula(Expression.literal(3))
