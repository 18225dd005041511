from drive.main import run

run()
