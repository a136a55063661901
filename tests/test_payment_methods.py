import pytest

from clinic_ledger.core.errors import AccountNotFound, InvalidPaymentMethod, PaymentMethodNotFound
from clinic_ledger.models import DepositChannel
from clinic_ledger.services.payment_methods import (
    add_payment_method,
    deactivate_payment_method,
    list_payment_methods,
    update_payment_method,
)
from clinic_ledger.services.transaction import Owned


@pytest.fixture
def txn(session_factory):
    return Owned(session_factory)


def test_add_and_list_payment_methods_default_first(txn, make_account):
    account = make_account("0")
    first = add_payment_method(txn, account, "baridi_mob", account_number=" 0021 ", account_name="Amina")
    second = add_payment_method(txn, account, "edahabia", account_number="6280", is_default=True)
    add_payment_method(txn, account, "bank_transfer", bank_name="BNA", branch_code="")

    methods = list_payment_methods(txn, account)

    assert methods[0].id == second.id
    assert len(methods) == 3
    assert first.account_number == "0021"
    assert first.channel == DepositChannel.BARIDI_MOB
    assert methods[-1].id == first.id
    assert [method.branch_code for method in methods if method.bank_name == "BNA"] == [None]


def test_only_one_default_per_account(txn, make_account):
    account = make_account("0")
    other = make_account("0")
    a = add_payment_method(txn, account, "edahabia", is_default=True)
    b = add_payment_method(txn, account, "baridi_mob", is_default=True)
    other_default = add_payment_method(txn, other, "cash_deposit", is_default=True)

    defaults = [method.id for method in list_payment_methods(txn, account) if method.is_default]
    assert defaults == [b.id]

    update_payment_method(txn, account, a.id, is_default=True)
    defaults = [method.id for method in list_payment_methods(txn, account) if method.is_default]
    assert defaults == [a.id]
    assert list_payment_methods(txn, other)[0].id == other_default.id
    assert list_payment_methods(txn, other)[0].is_default is True


def test_update_changes_only_given_fields(txn, make_account):
    account = make_account("0")
    method = add_payment_method(txn, account, "bank_transfer", account_number="111", bank_name="CPA")

    updated = update_payment_method(txn, account, method.id, channel="edahabia", account_number="222")

    assert updated.channel == DepositChannel.EDAHABIA
    assert updated.account_number == "222"
    assert updated.bank_name == "CPA"
    assert updated.is_default is False
    with pytest.raises(TypeError):
        update_payment_method(txn, account, method.id, iban="DZ00")


def test_deactivate_hides_method_and_clears_default(txn, make_account):
    account = make_account("0")
    method = add_payment_method(txn, account, "cash_deposit", is_default=True)

    removed = deactivate_payment_method(txn, account, method.id)

    assert removed.is_active is False
    assert removed.is_default is False
    assert list_payment_methods(txn, account) == []


def test_payment_method_validation_and_ownership(txn, make_account):
    account = make_account("0")
    stranger = make_account("0")
    method = add_payment_method(txn, account, "edahabia")

    with pytest.raises(InvalidPaymentMethod):
        add_payment_method(txn, account, "paypal")
    with pytest.raises(InvalidPaymentMethod):
        update_payment_method(txn, account, method.id, channel="paypal")
    with pytest.raises(AccountNotFound):
        add_payment_method(txn, 9999, "edahabia")
    with pytest.raises(AccountNotFound):
        list_payment_methods(txn, 9999)
    with pytest.raises(PaymentMethodNotFound):
        update_payment_method(txn, stranger, method.id, account_name="Not mine")
    with pytest.raises(PaymentMethodNotFound):
        deactivate_payment_method(txn, stranger, method.id)
    with pytest.raises(PaymentMethodNotFound):
        deactivate_payment_method(txn, account, 9999)

    assert [m.id for m in list_payment_methods(txn, account)] == [method.id]
