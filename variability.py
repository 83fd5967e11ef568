#! /usr/bin/env python3
import sys
import pandas

from utils import mean

def variability(l):
    return (max(l)-min(l))/mean(l)

def variability_by_size(df):
    return df.groupby('size')['time'].agg(lambda times: variability(list(times)))

if __name__ == '__main__':
    if len(sys.argv) != 2:
        sys.exit('Syntax: %s <csv_file>' % sys.argv[0])
    df = pandas.read_csv(sys.argv[1])
    for size, value in variability_by_size(df).items():
        print('%d %f' % (size, value))
