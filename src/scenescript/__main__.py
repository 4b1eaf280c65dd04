from scenescript.main import main

main()
