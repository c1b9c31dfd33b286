from empdb.cli import run

run()
