"""
Test suite for identity module

Tests user variants, password hashing, age calculation, principals and the
user repository.
"""

import pytest
from datetime import date

from apibank.storage import InMemoryStorage
from apibank.users import (
    AccountHolder, Address, Admin, Principal, RoleName, ThirdParty,
    UserRepository, UserType, calculate_age, user_from_dict
)


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def repository(storage):
    return UserRepository(storage)


def make_holder(name="Teresa", dob=date(1970, 2, 20)) -> AccountHolder:
    return AccountHolder.create(
        name=name,
        username="username",
        password="123",
        date_of_birth=dob,
        primary_address=Address("Baker Street", "08080", "ciudad", "país"),
        mail_address=Address("avenue", "08880", "ciudad2", "país2")
    )


class TestAddress:
    def test_required_fields(self):
        with pytest.raises(ValueError, match="street, city, and country are required"):
            Address("", "08080", "ciudad", "país")

    def test_dict_form(self):
        address = Address("Evergreen Terrace", "08080", "ciudad", "país")
        assert Address.from_dict(address.to_dict()) == address
        assert Address.from_dict(None) is None


class TestPasswords:
    """Passwords are stored hashed and verified against the hash"""

    def test_password_not_stored_in_clear(self):
        admin = Admin.create("admin", "username", "password")
        assert admin.password_hash != "password"
        assert "password" not in admin.to_dict().values()

    def test_verify_password(self):
        admin = Admin.create("admin", "username", "password")
        assert admin.verify_password("password")
        assert not admin.verify_password("wrong")

    def test_set_password_changes_salt(self):
        admin = Admin.create("admin", "username", "password")
        old_salt = admin.password_salt
        admin.set_password("new-password")
        assert admin.password_salt != old_salt
        assert admin.verify_password("new-password")
        assert not admin.verify_password("password")


class TestAge:
    def test_birthday_not_yet_reached(self):
        assert calculate_age(date(2005, 8, 30), date(2024, 8, 29)) == 18

    def test_on_birthday(self):
        assert calculate_age(date(2005, 8, 30), date(2024, 8, 30)) == 19

    def test_holder_age_on(self):
        holder = make_holder(dob=date(1970, 2, 20))
        assert holder.age_on(date(2024, 1, 1)) == 53


class TestUserVariants:
    def test_created_users_have_no_roles_until_stored_by_service(self):
        assert Admin.create("admin", "u", "p").roles == []

    def test_third_party_keeps_hashed_key_and_username(self):
        third_party = ThirdParty.create("name", "hashedKey", "password", "user456")
        assert third_party.hashed_key == "hashedKey"
        assert third_party.username == "user456"
        assert third_party.user_type == UserType.THIRD_PARTY

    def test_user_from_dict_restores_variant(self):
        holder = make_holder()
        holder.roles = [RoleName.ACCOUNT_HOLDER]
        restored = user_from_dict(holder.to_dict())

        assert isinstance(restored, AccountHolder)
        assert restored == holder
        assert restored.primary_address.street == "Baker Street"
        assert restored.mail_address.street == "avenue"

    def test_has_role(self):
        admin = Admin.create("admin", "u", "p")
        admin.roles = [RoleName.ADMIN]
        assert admin.has_role(RoleName.ADMIN)
        assert not admin.has_role(RoleName.THIRD_PARTY)
        assert admin.role_names == ["ADMIN"]


class TestPrincipal:
    def test_for_user(self):
        holder = make_holder()
        holder.roles = [RoleName.ACCOUNT_HOLDER]
        principal = Principal.for_user(holder)

        assert principal.user_id == holder.id
        assert principal.username == "username"
        assert principal.has_role(RoleName.ACCOUNT_HOLDER)
        assert not principal.is_admin

    def test_system_principal_is_admin(self):
        assert Principal.system().is_admin


class TestUserRepository:
    """Repository lookups across the shared users table"""

    def test_save_and_get(self, repository):
        holder = repository.save(make_holder())
        loaded = repository.get(holder.id)
        assert isinstance(loaded, AccountHolder)
        assert loaded.date_of_birth == date(1970, 2, 20)

    def test_get_account_holder_ignores_other_variants(self, repository):
        admin = repository.save(Admin.create("admin", "u", "p"))
        assert repository.get(admin.id) is not None
        assert repository.get_account_holder(admin.id) is None
        assert repository.get_account_holder("missing") is None

    def test_find_by_name(self, repository):
        repository.save(make_holder("Teresa"))
        repository.save(make_holder("Marisa", date(2005, 8, 30)))

        marisa = repository.find_by_name("Marisa")
        assert marisa.date_of_birth == date(2005, 8, 30)
        assert repository.find_by_name("Marisa", UserType.ADMIN) is None
        assert repository.find_by_name("nobody") is None

    def test_usernames_may_repeat(self, repository):
        repository.save(make_holder("Teresa"))
        repository.save(make_holder("Marisa"))
        assert len(repository.find_by_username("username")) == 2

    def test_authenticate(self, repository):
        admin = repository.save(Admin.create("admin", "root", "secret"))
        assert repository.authenticate("root", "secret").id == admin.id
        assert repository.authenticate("root", "wrong") is None
        assert repository.authenticate("nobody", "secret") is None

    def test_delete(self, repository):
        admin = repository.save(Admin.create("admin", "u", "p"))
        assert repository.delete(admin.id)
        assert not repository.exists(admin.id)
