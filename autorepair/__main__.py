from autorepair.main import main

main()
