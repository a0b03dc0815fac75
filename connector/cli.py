"""
Flask CLI commands

    flask init-db
    flask recompute-ratings [--service-id ID]
    flask expire-subscriptions
"""
import click

from connector import db


def register_cli(app):

    @app.cli.command("init-db")
    def cli_init_db():
        """Create all database tables."""
        db.create_all()
        click.echo("Database tables created.")

    @app.cli.command("recompute-ratings")
    @click.option("--service-id", default=None, help="Only recompute this service.")
    def cli_recompute_ratings(service_id):
        """Rebuild service rating aggregates from their reviews."""
        from connector.services import rating_aggregator

        if service_id:
            result = rating_aggregator.recompute(service_id)
            if result is None:
                raise click.ClickException("Service {} not updated (missing or store error).".format(service_id))
            click.echo("Service {}: average={} count={}".format(service_id, *result))
            return

        count = rating_aggregator.recompute_all()
        click.echo("Recomputed ratings for {} services.".format(count))

    @app.cli.command("expire-subscriptions")
    def cli_expire_subscriptions():
        """Expire subscriptions whose paid period has ended."""
        from connector.scheduler import sweep_subscriptions

        expired, expiring = sweep_subscriptions(app)
        click.echo("Expired {} subscriptions; {} about to expire.".format(expired, len(expiring)))
