from rentsphere.commands import check_overdue, expire_payments, simulate_deliveries


def test_cli_commands_report_counts(app):
	runner = app.test_cli_runner()

	result = runner.invoke(simulate_deliveries)
	assert result.exit_code == 0
	assert "delivery transition(s) applied" in result.output

	result = runner.invoke(check_overdue)
	assert result.exit_code == 0
	assert "overdue rental(s) updated" in result.output

	result = runner.invoke(expire_payments)
	assert result.exit_code == 0
	assert "request(s) expired" in result.output
