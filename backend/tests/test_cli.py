import json

from commcentre.models import Product


def test_seed_demo_command(app, db_session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["inventory", "seed-demo"])

    assert result.exit_code == 0
    assert "PASS Added 8 demo products" in result.output
    assert db_session.query(Product).count() == 8


def test_low_stock_command(app, db_session, make_product):
    make_product(name="Nearly gone", stock=1)
    runner = app.test_cli_runner()

    result = runner.invoke(args=["inventory", "low-stock"])

    assert result.exit_code == 0
    assert "Nearly gone" in result.output


def test_jobs_board_command(app, db_session, make_job):
    make_job(customer_name="Ruwan", status="Printing/Cutting", total=500, advance=100)
    runner = app.test_cli_runner()

    result = runner.invoke(args=["jobs", "board"])

    assert result.exit_code == 0
    assert "Printing   1" in result.output
    assert "Ruwan" in result.output
    assert "bal 400.00" in result.output


def test_backup_export_command(app, db_session, make_product, tmp_path):
    make_product(name="A4 Paper")
    target = tmp_path / "backup.json"
    runner = app.test_cli_runner()

    result = runner.invoke(args=["backup", "export", "--output", str(target)])

    assert result.exit_code == 0
    data = json.loads(target.read_text(encoding="utf-8"))
    assert [p["name"] for p in data["products"]] == ["A4 Paper"]
    assert data["sales"] == [] and data["jobs"] == []


def test_reset_db_requires_confirmation(app, db_session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["system", "reset-db"])

    assert result.exit_code == 1
    assert "Refusing" in result.output
