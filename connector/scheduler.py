"""
Background scheduler

Runs periodic subscription housekeeping:
- Expire active subscriptions whose paid period has ended
- Log providers whose subscription ends within the warning window

Only started by ``create_app`` when ENABLE_SCHEDULER is true, so a single
instance in a deployment should enable it.
"""
import logging

from apscheduler.schedulers.background import BackgroundScheduler

logger = logging.getLogger(__name__)


def sweep_subscriptions(app):
    """Expire lapsed subscriptions and signal those about to expire.

    Returns:
        tuple: (expired count, list of provider ids about to expire)
    """
    with app.app_context():
        from connector.services import subscription_lifecycle

        expired = subscription_lifecycle.expire_lapsed()
        if expired:
            logger.info("Scheduler: expired %d lapsed subscriptions", expired)

        expiring = [s.provider_id for s in subscription_lifecycle.expiring_soon()]
        for provider_id in expiring:
            logger.info("Scheduler: subscription for provider %s is about to expire", provider_id)

        return expired, expiring


def init_scheduler(app):
    """Initialize and start the background scheduler."""
    interval = app.config["SUBSCRIPTION_SWEEP_INTERVAL"]

    scheduler = BackgroundScheduler(daemon=True)
    scheduler.add_job(
        sweep_subscriptions,
        "interval",
        seconds=int(interval.total_seconds()),
        args=[app],
        id="sweep_subscriptions",
        name="Expire lapsed subscriptions",
        max_instances=1,
        coalesce=True,
    )

    try:
        scheduler.start()
    except Exception:
        logger.exception("Failed to start scheduler")
        return None

    app.extensions["scheduler"] = scheduler
    logger.info("Background scheduler started, sweeping every %s", interval)
    return scheduler
