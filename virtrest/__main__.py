from virtrest.app import main

main()
