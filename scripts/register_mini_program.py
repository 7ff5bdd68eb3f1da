"""Utility script to register a mini-program and its WeChat Pay merchant."""

from __future__ import annotations

import argparse
from getpass import getpass

from sqlalchemy.exc import SQLAlchemyError

from app.domain.entities import Account, Merchant
from app.infrastructure.database import SessionLocal, initialize_database
from app.infrastructure.repositories import AccountRepository, MerchantRepository


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the registration."""

    parser = argparse.ArgumentParser(
        description="Register a mini-program account and the merchant that receives its payments.",
    )
    parser.add_argument("--app-id", required=True, help="Mini-program AppID")
    parser.add_argument("--name", default=None, help="Display name of the mini-program")
    parser.add_argument(
        "--app-secret",
        default=None,
        help="Mini-program AppSecret. Prompted interactively when omitted.",
    )
    parser.add_argument("--mch-id", required=True, help="WeChat Pay merchant id")
    parser.add_argument(
        "--api-v3-key",
        default=None,
        help="Merchant APIv3 key (32 characters). Prompted interactively when omitted.",
    )
    parser.add_argument(
        "--platform-cert-serial",
        default=None,
        help="Serial number of the platform certificate callbacks are signed with.",
    )
    return parser.parse_args()


def main() -> None:
    """Create the account and merchant described by the command line."""

    args = parse_args()

    app_secret = args.app_secret or getpass("Mini-program AppSecret: ")
    api_v3_key = args.api_v3_key or getpass("Merchant APIv3 key: ")
    if len(api_v3_key.encode("utf-8")) != 32:
        raise SystemExit("The APIv3 key must be exactly 32 bytes long.")

    initialize_database()

    session = SessionLocal()
    try:
        accounts = AccountRepository(session)
        account = accounts.get_by_app_id(args.app_id) or accounts.create(
            Account(id=None, app_id=args.app_id, app_secret=app_secret, name=args.name)
        )
        merchants = MerchantRepository(session)
        merchant = merchants.get_by_mch_id(args.mch_id) or merchants.create(
            Merchant(
                id=None,
                mch_id=args.mch_id,
                api_v3_key=api_v3_key,
                platform_cert_serial=args.platform_cert_serial,
            )
        )
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Could not save the registration: {exc}") from exc
    else:
        print(
            "Registration stored:\n"
            f"  Account: {account.id} ({account.app_id})\n"
            f"  Merchant: {merchant.id} ({merchant.mch_id})\n"
            f"  Place the platform certificate at <WECHAT_PAY_CERT_DIR>/{merchant.mch_id}_platform_cert.pem"
        )
    finally:
        session.close()


if __name__ == "__main__":
    main()
