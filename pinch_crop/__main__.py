from pinch_crop.app import main

main()
