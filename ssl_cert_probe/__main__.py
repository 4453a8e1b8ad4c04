from ssl_cert_probe.cli import run

run()
