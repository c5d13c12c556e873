"""Profile, password, address book and referral routes."""

from flask import Blueprint
from flask_login import current_user, login_required

from kitchen.forms.auth import AddressForm, ChangePasswordForm, NewAddressForm, ProfileForm
from kitchen.services import accounts
from kitchen.utils.responses import success

users_bp = Blueprint('users', __name__)


@users_bp.route('/profile')
@login_required
def profile():
    return success(current_user.to_dict())


@users_bp.route('/profile', methods=['PUT'])
@login_required
def update_profile():
    form = ProfileForm().validate_or_raise()
    data = accounts.update_profile(current_user, **form.payload())
    return success(data, 'Profile updated successfully')


@users_bp.route('/change-password', methods=['POST'])
@login_required
def change_password():
    form = ChangePasswordForm().validate_or_raise()
    accounts.change_password(current_user, form.current_password.data, form.new_password.data)
    return success(message='Password changed successfully')


@users_bp.route('/addresses')
@login_required
def list_addresses():
    return success(accounts.list_addresses(current_user.id))


@users_bp.route('/addresses', methods=['POST'])
@login_required
def create_address():
    form = NewAddressForm().validate_or_raise()
    address = accounts.create_address(current_user.id, form.payload())
    return success(address, 'Address added successfully', 201)


@users_bp.route('/addresses/<int:address_id>', methods=['PUT'])
@login_required
def update_address(address_id):
    form = AddressForm().validate_or_raise()
    address = accounts.update_address(current_user.id, address_id, form.payload())
    return success(address, 'Address updated successfully')


@users_bp.route('/addresses/<int:address_id>', methods=['DELETE'])
@login_required
def delete_address(address_id):
    accounts.delete_address(current_user.id, address_id)
    return success(message='Address deleted successfully')


@users_bp.route('/referral')
@login_required
def referral():
    return success(accounts.referral_info(current_user))
