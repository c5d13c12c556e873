from datetime import datetime, timedelta

import pytest

from factories import PASSWORD, make_address, make_admin, make_user
from kitchen.errors import (AccountDisabled, CannotDelete, Conflict, EmailNotVerified,
                            InvalidAdminSecret, InvalidCredentials, InvalidOtp,
                            InvalidReferralCode, NotFound, PasswordMismatch, TooManyOtpRequests)
from kitchen.extensions import db, mail
from kitchen.models import Address, Order, OtpCode, PromoCode, User
from kitchen.services import accounts


def register(**kwargs):
    data = {
        'email': 'Ngozi@Example.com',
        'password': PASSWORD,
        'first_name': 'Ngozi',
        'last_name': 'Eze',
        'phone': '08031234567',
    }
    data.update(kwargs)
    return accounts.register_customer(**data)


def latest_code(user, purpose='EMAIL_VERIFICATION'):
    otp = (OtpCode.query.filter_by(user_id=user.id, purpose=purpose)
           .order_by(OtpCode.id.desc()).first())
    return otp.code


def age_codes(user, minutes):
    for otp in OtpCode.query.filter_by(user_id=user.id):
        otp.created_at -= timedelta(minutes=minutes)
    db.session.commit()


class TestRegistration:
    def test_registers_unverified_customer_with_referral_code(self, app_ctx):
        user = register()
        assert user.email == 'ngozi@example.com'
        assert user.role == 'CUSTOMER'
        assert user.is_email_verified is False
        assert user.check_password(PASSWORD)
        assert user.referral_code.startswith('CK')

        promo = PromoCode.query.filter_by(code=user.referral_code).one()
        assert promo.owner_id == user.id
        assert promo.discount_type == 'PERCENTAGE'

    def test_emails_a_verification_code(self, app_ctx):
        with mail.record_messages() as outbox:
            user = register()
        code = latest_code(user)
        assert len(code) == 6
        assert outbox[0].subject == 'Verify Your Email - Chuks Kitchen'
        assert code in outbox[0].body

    def test_duplicate_verified_email(self, app_ctx):
        make_user(email='ngozi@example.com')
        with pytest.raises(Conflict):
            register()

    def test_pending_signup_blocks_reregistration(self, app_ctx):
        register()
        with pytest.raises(EmailNotVerified):
            register(phone='08099999999')

    def test_abandoned_signup_is_replaced(self, app_ctx):
        old = register(now=datetime.utcnow() - timedelta(hours=25))
        old_id, old_code = old.id, old.referral_code

        user = register()
        assert user.id != old_id
        assert db.session.get(User, old_id) is None
        assert PromoCode.query.filter_by(code=old_code).first() is None

    def test_duplicate_phone(self, app_ctx):
        make_user(phone='08031234567')
        with pytest.raises(Conflict):
            register()

    def test_links_referrer(self, app_ctx):
        referrer = register()
        friend = register(email='friend@example.com', phone='08055555555',
                          referral_code=referrer.referral_code)
        assert friend.referred_by_id == referrer.id
        assert accounts.referral_info(referrer)['total_referrals'] == 1

    def test_referral_code_is_case_sensitive(self, app_ctx):
        make_user(referral_code='CKNGOZI1')
        with pytest.raises(InvalidReferralCode):
            register(referral_code='ckngozi1')

    def test_unknown_referral_code(self, app_ctx):
        with pytest.raises(InvalidReferralCode):
            register(referral_code='NOSUCHCODE')


class TestEmailVerification:
    def test_valid_code_verifies(self, app_ctx):
        user = register()
        verified = accounts.verify_email('ngozi@example.com', latest_code(user))
        assert verified.is_email_verified is True
        assert verified.last_login_at is not None

    def test_welcome_email_after_verification(self, app_ctx):
        user = register()
        with mail.record_messages() as outbox:
            accounts.verify_email('ngozi@example.com', latest_code(user))
        assert outbox[0].subject == 'Welcome to Chuks Kitchen!'

    def test_wrong_code(self, app_ctx):
        user = register()
        wrong = '000000' if latest_code(user) != '000000' else '111111'
        with pytest.raises(InvalidOtp):
            accounts.verify_email('ngozi@example.com', wrong)
        assert db.session.get(User, user.id).is_email_verified is False

    def test_expired_code_is_burnt(self, app_ctx):
        user = register()
        otp = OtpCode.query.filter_by(user_id=user.id).one()
        otp.expires_at = datetime.utcnow() - timedelta(minutes=1)
        db.session.commit()

        with pytest.raises(InvalidOtp):
            accounts.verify_email('ngozi@example.com', otp.code)
        assert db.session.get(OtpCode, otp.id).is_used is True

    def test_already_verified(self, app_ctx):
        make_user(email='chidi@example.com')
        with pytest.raises(Conflict):
            accounts.verify_email('chidi@example.com', '123456')

    def test_unknown_email(self, app_ctx):
        with pytest.raises(NotFound):
            accounts.verify_email('ghost@example.com', '123456')


class TestResendCode:
    def test_cooldown(self, app_ctx):
        register()
        with pytest.raises(TooManyOtpRequests):
            accounts.resend_verification_code('ngozi@example.com')

    def test_new_code_after_cooldown(self, app_ctx):
        user = register()
        age_codes(user, 3)
        accounts.resend_verification_code('ngozi@example.com')
        assert OtpCode.query.filter_by(user_id=user.id).count() == 2

    def test_verified_user(self, app_ctx):
        make_user(email='chidi@example.com')
        with pytest.raises(Conflict):
            accounts.resend_verification_code('chidi@example.com')


class TestPasswordReset:
    def test_reset_with_code(self, app_ctx):
        user = make_user(email='chidi@example.com')
        with mail.record_messages() as outbox:
            accounts.request_password_reset('chidi@example.com')
        code = latest_code(user, 'PASSWORD_RESET')
        assert code in outbox[0].body

        accounts.reset_password('chidi@example.com', code, 'Fresh@Start9')
        assert accounts.authenticate('chidi@example.com', 'Fresh@Start9').id == user.id

    def test_code_is_single_use(self, app_ctx):
        user = make_user(email='chidi@example.com')
        accounts.request_password_reset('chidi@example.com')
        code = latest_code(user, 'PASSWORD_RESET')
        accounts.reset_password('chidi@example.com', code, 'Fresh@Start9')
        with pytest.raises(InvalidOtp):
            accounts.reset_password('chidi@example.com', code, 'Other@Start9')

    def test_verification_code_does_not_reset(self, app_ctx):
        user = register()
        with pytest.raises(InvalidOtp):
            accounts.reset_password('ngozi@example.com', latest_code(user), 'Fresh@Start9')

    def test_unknown_email_is_silent(self, app_ctx):
        accounts.request_password_reset('ghost@example.com')
        assert OtpCode.query.count() == 0

    def test_cooldown(self, app_ctx):
        make_user(email='chidi@example.com')
        accounts.request_password_reset('chidi@example.com')
        with pytest.raises(TooManyOtpRequests):
            accounts.request_password_reset('chidi@example.com')


class TestAuthenticate:
    def test_valid_credentials(self, app_ctx):
        user = make_user(email='chidi@example.com')
        assert accounts.authenticate(' Chidi@example.com ', PASSWORD).id == user.id
        assert user.last_login_at is not None

    def test_wrong_password(self, app_ctx):
        make_user(email='chidi@example.com')
        with pytest.raises(InvalidCredentials):
            accounts.authenticate('chidi@example.com', 'wrong')

    def test_unknown_email(self, app_ctx):
        with pytest.raises(InvalidCredentials):
            accounts.authenticate('ghost@example.com', PASSWORD)

    def test_disabled_account(self, app_ctx):
        make_user(email='chidi@example.com', is_active=False)
        with pytest.raises(AccountDisabled):
            accounts.authenticate('chidi@example.com', PASSWORD)

    def test_unverified_email(self, app_ctx):
        make_user(email='chidi@example.com', is_email_verified=False)
        with pytest.raises(EmailNotVerified):
            accounts.authenticate('chidi@example.com', PASSWORD)


class TestAdminAccounts:
    def test_register_admin(self, app_ctx):
        admin = accounts.register_admin('Boss@Example.com', PASSWORD, 'Chuks', 'Okafor',
                                        admin_secret='kitchen-admin-secret')
        assert admin.email == 'boss@example.com'
        assert admin.is_admin()
        assert admin.is_email_verified is True

    def test_wrong_secret(self, app_ctx):
        with pytest.raises(InvalidAdminSecret):
            accounts.register_admin('boss@example.com', PASSWORD, 'Chuks', 'Okafor',
                                    admin_secret='guess')

    def test_disabled_without_configured_secret(self, app_ctx):
        app_ctx.config['ADMIN_REGISTRATION_SECRET'] = ''
        with pytest.raises(InvalidAdminSecret):
            accounts.register_admin('boss@example.com', PASSWORD, 'Chuks', 'Okafor',
                                    admin_secret='kitchen-admin-secret')

    def test_admin_email_taken(self, app_ctx):
        make_user(email='boss@example.com')
        with pytest.raises(Conflict):
            accounts.register_admin('boss@example.com', PASSWORD, 'Chuks', 'Okafor',
                                    admin_secret='kitchen-admin-secret')

    def test_admin_login(self, app_ctx):
        admin = make_admin(email='boss@example.com')
        assert accounts.authenticate_admin('boss@example.com', PASSWORD).id == admin.id

    def test_admin_login_refuses_customers(self, app_ctx):
        make_user(email='chidi@example.com')
        with pytest.raises(InvalidCredentials):
            accounts.authenticate_admin('chidi@example.com', PASSWORD)


class TestProfile:
    def test_update_profile(self, app_ctx):
        user = make_user()
        data = accounts.update_profile(user, first_name='Emeka', phone='08011112222')
        assert data['first_name'] == 'Emeka'
        assert data['phone'] == '08011112222'

    def test_phone_taken(self, app_ctx):
        make_user(phone='08011112222')
        user = make_user()
        with pytest.raises(Conflict):
            accounts.update_profile(user, phone='08011112222')

    def test_change_password(self, app_ctx):
        user = make_user()
        accounts.change_password(user, PASSWORD, 'NewSecret@456')
        assert user.check_password('NewSecret@456')

    def test_change_password_wrong_current(self, app_ctx):
        user = make_user()
        with pytest.raises(PasswordMismatch):
            accounts.change_password(user, 'nope', 'NewSecret@456')


class TestAddresses:
    def test_first_address_becomes_default(self, app_ctx):
        user = make_user()
        address = accounts.create_address(user.id, {'street': '1 Marina', 'city': 'Lagos Island',
                                                     'state': 'Lagos'})
        assert address['is_default'] is True
        assert address['label'] == 'Home'

    def test_new_default_replaces_old(self, app_ctx):
        user = make_user()
        first = make_address(user)
        second = accounts.create_address(user.id, {'street': '2 Broad St', 'city': 'Lagos',
                                                   'state': 'Lagos', 'is_default': True})
        db.session.refresh(first)
        assert first.is_default is False
        assert second['is_default'] is True

    def test_update_other_users_address(self, app_ctx):
        address = make_address(make_user())
        with pytest.raises(NotFound):
            accounts.update_address(make_user().id, address.id, {'city': 'Abuja'})

    def test_delete_reassigns_default(self, app_ctx):
        user = make_user()
        default = make_address(user)
        spare = make_address(user, is_default=False, street='9 Allen Avenue')
        accounts.delete_address(user.id, default.id)
        assert db.session.get(Address, spare.id).is_default is True

    def test_delete_address_used_by_order(self, app_ctx):
        user = make_user()
        address = make_address(user)
        db.session.add(Order(order_number='CK42', user_id=user.id, address_id=address.id,
                             contact_number='08012345678', subtotal=0, delivery_fee=0,
                             service_fee=0, tax=0, total=0, payment_method='CARD'))
        db.session.commit()
        with pytest.raises(CannotDelete):
            accounts.delete_address(user.id, address.id)


class TestOtpCleanup:
    def _seed(self, app):
        with app.app_context():
            user = make_user()
            now = datetime.utcnow()
            db.session.add_all([
                OtpCode(user_id=user.id, code='111111', purpose='PASSWORD_RESET',
                        expires_at=now + timedelta(minutes=5)),
                OtpCode(user_id=user.id, code='222222', purpose='PASSWORD_RESET',
                        expires_at=now - timedelta(minutes=5)),
                OtpCode(user_id=user.id, code='333333', purpose='PASSWORD_RESET',
                        expires_at=now + timedelta(minutes=5), is_used=True),
            ])
            db.session.commit()

    def test_purge_command_keeps_live_codes(self, app):
        self._seed(app)
        result = app.test_cli_runner().invoke(args=['purge-otp-codes'])
        assert 'Removed 2 one-time codes.' in result.output
        with app.app_context():
            assert [otp.code for otp in OtpCode.query.all()] == ['111111']
